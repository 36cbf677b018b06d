"""
Log-covariate model: y ~ log(x1) + x2.

dy/dx1 = b1 / x1: each extra unit of x1 matters less than the last.
With b1 = 1 the effect at x1 = 2 is 0.5.
"""

from marginfx import EvaluationPoint, FunctionalFormOLS, simulate

TRUTH = {"x1": 1.0, "x2": 0.5}

df = simulate("log_covariate", TRUTH, n=2_000, noise=0.5, seed=0)

result = FunctionalFormOLS("log_covariate").fit(df)
print(result.summary())

print("Diminishing returns (fitted vs true):")
for x1 in (0.5, 1.0, 2.0, 4.0):
    fitted = result.effect_at(EvaluationPoint(x1=x1)).value
    print(f"  x1 = {x1:.1f}: {fitted:8.4f}   (true {TRUTH['x1'] / x1:.4f})")
print()

print(result.validate(truth=TRUTH).summary())
