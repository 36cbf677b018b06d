"""
Log-log model: log(y) ~ log(x1) + x2.

b1 is an elasticity: a 1% increase in x1 changes y by about b1 percent,
everywhere.  The same effect on the log scale is b1 / x1 and on the level
scale b1 * y / x1.
"""

from marginfx import FunctionalFormOLS, Scale, simulate

TRUTH = {"x1": 0.8, "x2": 0.3}

df = simulate("log_log", TRUTH, n=2_000, noise=0.5, seed=0)

result = FunctionalFormOLS("log_log").fit(df)
print(result.executive_summary())
print()

for scale in Scale:
    est = result.ame(scale=scale)
    lo, hi = est.conf_int
    print(f"  AME on the {scale.value:<10} scale: {est.effect:8.4f}  [{lo:.4f}, {hi:.4f}]")
print()

print(result.validate(scale="elasticity", truth=TRUTH).summary())
