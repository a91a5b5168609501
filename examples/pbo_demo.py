"""Demonstrate PBO separating noise from a real edge."""

from cscv_pbo import pbo
from cscv_pbo.datasets import no_skill, skilled, sparse


if __name__ == "__main__":
    S = 10

    print("strategies with no skill (should be overfit)...")
    result = pbo(no_skill(1560, 20, seed=99989), S, method="average", seed=1)
    print(f"  PBO score: {result.pbo:.4f}")
    print(f"  combinations tested: {result.n_combinations}")
    if result.pbo > 0.5:
        print("  -> high PBO: the in-sample winner is likely overfit\n")

    print("mostly-zero returns, Sharpe ranking...")
    result = pbo(sparse(1560, 20, seed=99989), S, method="sharpe", seed=1)
    print(f"  PBO score: {result.pbo:.4f}")
    print(f"  mean Spearman IS/OOS: {result.summary()['mean_spearman']}\n")

    print("one skilled strategy among noise...")
    result = pbo(skilled(1000, 20, edge=0.2, seed=0), S, method="sharpe", seed=1)
    print(f"  PBO score: {result.pbo:.4f}")
    degradation = result.performance_degradation()
    print(f"  OOS ~ IS slope: {degradation['slope']:.4f}")
    print(f"  probability of OOS loss: {degradation['prob_loss']:.4f}")
