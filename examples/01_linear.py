"""
Linear model: y ~ x1 + x2.

The marginal effect of x1 is its coefficient, the same at every point.
True effect: 2.0.
"""

from marginfx import EvaluationPoint, FunctionalFormOLS, simulate

TRUTH = {"x1": 2.0, "x2": 0.5}

df = simulate("linear", TRUTH, n=2_000, seed=0)

result = FunctionalFormOLS("linear").fit(df)
print(result.summary())

for x1 in (1.0, 2.5, 4.0):
    effect = result.effect_at(EvaluationPoint(x1=x1, x2=0.5))
    print(f"  dy/dx1 at x1 = {x1}: {effect.value:.4f}")
print()

print(result.validate(truth=TRUTH).summary())
