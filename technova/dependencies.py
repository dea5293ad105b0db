from fastapi import Depends

from technova.core.db import interactions_coll
from technova.core.http_client import CatalogClient, catalog_client
from technova.services.analytics import AnalyticsAggregator
from technova.services.recommender import PersonalRecommender
from technova.services.recorder import InteractionRecorder
from technova.services.similarity import SimilarityScorer
from technova.services.store import EventStore, MongoEventStore

event_store = MongoEventStore(interactions_coll)


def get_event_store() -> EventStore:
    return event_store


def get_catalog() -> CatalogClient:
    return catalog_client


def get_recorder(store: EventStore = Depends(get_event_store)) -> InteractionRecorder:
    return InteractionRecorder(store)


def get_similarity_scorer(catalog: CatalogClient = Depends(get_catalog)) -> SimilarityScorer:
    return SimilarityScorer(catalog)


def get_recommender(
    store: EventStore = Depends(get_event_store),
    catalog: CatalogClient = Depends(get_catalog),
) -> PersonalRecommender:
    return PersonalRecommender(store, catalog)


def get_aggregator(store: EventStore = Depends(get_event_store)) -> AnalyticsAggregator:
    return AnalyticsAggregator(store)
