"""
Log-outcome model: log(y) ~ x1 + x2.

b1 is a semi-elasticity: a one-unit increase in x1 changes y by about
100*b1 percent.  On the level scale the effect is b1 * y, so it grows
with the outcome.
"""

from marginfx import FunctionalFormOLS, Scale, simulate

TRUTH = {"x1": 0.2, "x2": 0.5}

df = simulate("log_outcome", TRUTH, n=2_000, noise=0.5, seed=0)

result = FunctionalFormOLS("log_outcome").fit(df)
print(result.summary())
print(result.executive_summary())
print()

for scale in (Scale.LOG, Scale.LEVEL):
    print(result.validate(scale=scale, truth=TRUTH).summary())
