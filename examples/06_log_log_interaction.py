"""
Log-log model with interaction: log(y) ~ log(x1) * x2.

The elasticity of y with respect to x1 is b1 + b_int * x2, so it changes
with x2.
"""

from marginfx import EvaluationPoint, FunctionalFormOLS, simulate

TRUTH = {"x1": 0.8, "x2": 0.3, "x1:x2": 0.5}

df = simulate("log_log_interaction", TRUTH, n=2_000, noise=0.5, seed=0)

result = FunctionalFormOLS("log_log_interaction").fit(df)
print(result.summary())

print("Elasticity across x2 (fitted vs true):")
for x2 in (0.0, 0.5, 1.0):
    fitted = result.effect_at(EvaluationPoint(x1=1.0, x2=x2), scale="elasticity")
    true = TRUTH["x1"] + TRUTH["x1:x2"] * x2
    print(f"  x2 = {x2:.1f}: {fitted.value:8.4f}   (true {true:.4f})")
    print(f"    {fitted.interpret()}")
print()

print(result.validate(scale="elasticity", truth=TRUTH).summary())
