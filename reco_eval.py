import argparse
import asyncio
import random
from collections import defaultdict, Counter
from typing import Dict, List, Set, Tuple

from technova.core.db import interactions_coll
from technova.core.http_client import CatalogClient
from technova.models import InteractionEvent, InteractionType, Product
from technova.services.recommender import PersonalRecommender, build_profile
from technova.services.store import EventStore, MongoEventStore

TRAIN_RATIO = 0.7
MIN_ACTIONS_FOR_USER = 3
POSITIVE_ACTIONS = {InteractionType.CART_ADD, InteractionType.PURCHASE}
SEGMENTS = ["all", "cold", "casual", "power"]
ALGOS = ["personal", "popular", "random"]


def user_type(total_actions: int) -> str:
  if total_actions < 5:
    return "cold"
  elif total_actions < 20:
    return "casual"
  else:
    return "power"


def recommend_personal(
  recommender: PersonalRecommender,
  train: List[InteractionEvent],
  products: List[Product],
  k: int,
) -> List[int]:
  if not train:
    return []
  by_id = {p.id: p for p in products}
  now = train[-1].created_at
  window = [e for e in train if e.created_at >= now - recommender.lookback]
  profile = build_profile(
    window, now, recommender.half_life,
    lambda pid: by_id[pid].category if pid in by_id else None,
  )
  return [rec.product_id for rec, _ in recommender.score_candidates(profile, products)[:k]]


def build_global_popularity(events: List[InteractionEvent]) -> List[int]:
  cnt = Counter(e.product_id for e in events if e.interaction_type in POSITIVE_ACTIONS)
  return [pid for pid, _ in cnt.most_common()]


def recommend_popular(global_popular: List[int], banned: Set[int], k: int) -> List[int]:
  return [pid for pid in global_popular if pid not in banned][:k]


def recommend_random(all_product_ids: List[int], banned: Set[int], k: int, rng: random.Random) -> List[int]:
  candidates = [pid for pid in all_product_ids if pid not in banned]
  if len(candidates) <= k:
    return candidates
  return rng.sample(candidates, k)


def precision_recall_f1(recommended: List[int], relevant: Set[int]) -> Tuple[float, float, float]:
  if not recommended or not relevant:
    return 0.0, 0.0, 0.0

  tp = len(set(recommended) & relevant)
  precision = tp / len(recommended)
  recall = tp / len(relevant)

  if precision + recall == 0:
    return precision, recall, 0.0
  return precision, recall, 2 * precision * recall / (precision + recall)


def evaluate(
  events: List[InteractionEvent],
  products: List[Product],
  recommender: PersonalRecommender,
  k: int = 10,
  seed: int = 42,
) -> Tuple[int, Dict[str, Dict[str, Dict[str, float]]]]:
  """Time-split every user's history and score each algorithm on the held-out tail.

  A product counts as relevant when the user put it in the cart or bought it
  during the test part. Returns the number of evaluated users and the
  per-algorithm, per-segment sums.
  """
  stats: Dict[str, Dict[str, Dict[str, float]]] = {
    alg: {seg: {"prec_sum": 0.0, "rec_sum": 0.0, "f1_sum": 0.0, "users": 0} for seg in SEGMENTS}
    for alg in ALGOS
  }
  rng = random.Random(seed)

  by_user: Dict[str, List[InteractionEvent]] = defaultdict(list)
  for e in events:
    by_user[e.user_id].append(e)

  all_product_ids = sorted(p.id for p in products)
  global_popular = build_global_popularity(events)
  processed = 0

  for user_id in sorted(by_user):
    acts = sorted(by_user[user_id], key=lambda e: e.created_at)
    if len(acts) < MIN_ACTIONS_FOR_USER:
      continue

    split_idx = max(1, int(len(acts) * TRAIN_RATIO))
    train, test = acts[:split_idx], acts[split_idx:]
    relevant = {e.product_id for e in test if e.interaction_type in POSITIVE_ACTIONS}
    if not relevant:
      continue

    processed += 1
    seen = {e.product_id for e in train}
    segs = ["all", user_type(len(acts))]

    results = {
      "personal": recommend_personal(recommender, train, products, k),
      "popular": recommend_popular(global_popular, seen, k),
      "random": recommend_random(all_product_ids, seen, k, rng),
    }
    for alg, recs in results.items():
      p, r, f1 = precision_recall_f1(recs, relevant)
      for seg in segs:
        s = stats[alg][seg]
        s["prec_sum"] += p
        s["rec_sum"] += r
        s["f1_sum"] += f1
        s["users"] += 1

  return processed, stats


def print_report(processed: int, stats, k: int) -> None:
  print(f"\nUsers evaluated: {processed}")
  print(f"K = {k}, train_ratio = {TRAIN_RATIO}, MIN_ACTIONS_FOR_USER = {MIN_ACTIONS_FOR_USER}")
  print("\n=== Mean Precision@K, Recall@K, F1@K ===\n")
  for seg in SEGMENTS:
    print(f"--- Segment: {seg} ---")
    for alg in ALGOS:
      info = stats[alg][seg]
      n = info["users"]
      if n == 0:
        print(f"  {alg:8s}: no data")
        continue
      print(
        f"  {alg:8s}: P={info['prec_sum'] / n:.3f}, R={info['rec_sum'] / n:.3f}, "
        f"F1={info['f1_sum'] / n:.3f}  (users={n})"
      )
    print()


async def main():
  ap = argparse.ArgumentParser(description="Offline quality check of the personal recommender")
  ap.add_argument("--k", type=int, default=10)
  ap.add_argument("--seed", type=int, default=42)
  args = ap.parse_args()

  print("=== TechNova Recommendation Quality Test ===")

  store: EventStore = MongoEventStore(interactions_coll)
  catalog = CatalogClient()
  try:
    events = await store.query()
    products = await catalog.get_products()
  finally:
    await catalog.aclose()

  if not events or not products:
    print("No interactions or no catalog products; nothing to evaluate.")
    return

  print(f"Interactions: {len(events)}")
  print(f"Products:     {len(products)}")

  recommender = PersonalRecommender(store, catalog)
  processed, stats = evaluate(events, products, recommender, k=args.k, seed=args.seed)
  if processed == 0:
    print("Not enough users with held-out cart adds or purchases.")
    return
  print_report(processed, stats, args.k)


if __name__ == "__main__":
  asyncio.run(main())
