"""Parameter validation against provider ranges.

Local validation must name the offending field, its value and the allowed
range, and must be deterministic for identical inputs.
"""
from __future__ import annotations

import pytest

from llm_gateway.base.errors import ParameterValidationError, UnknownProviderError
from llm_gateway.base.models import GenerationParameters
from llm_gateway.base.validation import ParameterValidator


@pytest.fixture()
def validator(alpha_registry) -> ParameterValidator:
    return ParameterValidator(alpha_registry)


@pytest.mark.parametrize(
    "params",
    [
        GenerationParameters(),
        GenerationParameters(temperature=0),
        GenerationParameters(temperature=1),
        GenerationParameters(temperature=0.7, top_p=0.9, max_tokens=4096),
    ],
)
def test_in_range_parameters_pass(validator, params) -> None:
    validator.validate("alpha", params, model_id="alpha-large")


def test_out_of_range_temperature_names_field_and_range(validator) -> None:
    with pytest.raises(ParameterValidationError) as exc:
        validator.validate("alpha", GenerationParameters(temperature=5.0))
    err = exc.value
    assert err.field == "temperature"  # nosec B101
    assert err.details() == {"field": "temperature", "value": 5.0, "allowedRange": [0, 1]}  # nosec B101
    assert "temperature" in str(err) and "[0, 1]" in str(err)  # nosec B101


def test_first_violation_in_fixed_order_wins(validator) -> None:
    params = GenerationParameters(top_p=3.0, temperature=-1.0)
    with pytest.raises(ParameterValidationError) as exc:
        validator.validate("alpha", params)
    assert exc.value.field == "temperature"  # nosec B101


def test_undeclared_tunable_is_rejected_not_dropped(validator) -> None:
    with pytest.raises(ParameterValidationError) as exc:
        validator.validate("alpha", GenerationParameters(top_k=5))
    assert exc.value.allowed_range is None  # nosec B101
    assert "not supported" in str(exc.value)  # nosec B101


def test_max_tokens_is_capped_by_model_ceiling(validator) -> None:
    with pytest.raises(ParameterValidationError) as exc:
        validator.validate("alpha", GenerationParameters(max_tokens=5000), model_id="alpha-large")
    assert exc.value.details()["allowedRange"] == [1, 4096]  # nosec B101


def test_integer_tunables_reject_floats(validator) -> None:
    with pytest.raises(ParameterValidationError) as exc:
        validator.validate("alpha", GenerationParameters(max_tokens=10.5))  # type: ignore[arg-type]
    assert exc.value.reason == "not_integer"  # nosec B101


def test_booleans_are_not_numbers(validator) -> None:
    with pytest.raises(ParameterValidationError) as exc:
        validator.validate("alpha", GenerationParameters(temperature=True))
    assert exc.value.reason == "not_number"  # nosec B101


def test_non_finite_values_are_rejected(validator) -> None:
    with pytest.raises(ParameterValidationError) as exc:
        validator.validate("alpha", GenerationParameters(temperature=float("nan")))
    assert exc.value.details()["value"] == "nan"  # nosec B101


def test_unknown_provider(validator) -> None:
    with pytest.raises(UnknownProviderError):
        validator.validate("beta", GenerationParameters())


def test_validation_is_deterministic(validator) -> None:
    messages = []
    for _ in range(3):
        with pytest.raises(ParameterValidationError) as exc:
            validator.validate("alpha", GenerationParameters(temperature=1.5))
        messages.append((str(exc.value), exc.value.details()))
    assert messages.count(messages[0]) == 3  # nosec B101
