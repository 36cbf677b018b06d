"""
Interaction model: y ~ x1 * x2.

The effect of x1 depends on x2:  dy/dx1 = b1 + b_int * x2.
With b1 = 1 and b_int = 10, the effect at x2 = 0.5 is 6, and the average
marginal effect is b1 + b_int * mean(x2).
"""

from marginfx import EvaluationPoint, FunctionalFormOLS, simulate

TRUTH = {"x1": 1.0, "x2": 0.5, "x1:x2": 10.0}

df = simulate("interaction", TRUTH, n=2_000, seed=0)

result = FunctionalFormOLS("interaction").fit(df)
print(result.summary())

print("Effect of x1 across x2 (fitted vs true):")
for x2 in (0.0, 0.25, 0.5, 0.75, 1.0):
    point = EvaluationPoint(x1=1.0, x2=x2)
    fitted = result.effect_at(point).value
    true = TRUTH["x1"] + TRUTH["x1:x2"] * x2
    print(f"  x2 = {x2:.2f}: {fitted:8.4f}   (true {true:.4f})")
print()

print(result.validate(truth=TRUTH).summary())
