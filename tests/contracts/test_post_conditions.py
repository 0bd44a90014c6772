"""
Tests for STX post-conditions.
"""
import pytest

from sihiri_sdk.contracts.post_conditions import (
    FungibleConditionCode,
    PostConditionMode,
    STXPostCondition,
    make_standard_stx_post_condition,
    max_spend,
)

DEPLOYER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"


def test_max_spend_wire_format():
    pc = max_spend(DEPLOYER, 1_000_000)
    assert pc.condition_code == FungibleConditionCode.LESS_EQUAL
    assert pc.to_hex() == (
        "00" "02" "1a"
        "6d78de7b0625dfbfc16c3a8a5735f6dc3dc3f2ce"
        "05"
        "00000000000f4240"
    )


@pytest.mark.parametrize("code,bounded", [
    (FungibleConditionCode.EQUAL, True),
    (FungibleConditionCode.LESS, True),
    (FungibleConditionCode.LESS_EQUAL, True),
    (FungibleConditionCode.GREATER, False),
    (FungibleConditionCode.GREATER_EQUAL, False),
])
def test_bounds_outflow(code, bounded):
    assert make_standard_stx_post_condition(DEPLOYER, code, 10).bounds_outflow is bounded


def test_condition_code_accepts_int():
    pc = STXPostCondition(DEPLOYER, 5, 10)
    assert pc.condition_code is FungibleConditionCode.LESS_EQUAL


def test_invalid_amounts():
    with pytest.raises(ValueError):
        max_spend(DEPLOYER, -1)
    with pytest.raises(ValueError):
        max_spend(DEPLOYER, 2 ** 64)
    with pytest.raises(TypeError):
        max_spend(DEPLOYER, 1.5)


def test_invalid_principal():
    with pytest.raises(ValueError):
        max_spend("not-an-address", 10)


def test_mode_values():
    assert int(PostConditionMode.ALLOW) == 1
    assert int(PostConditionMode.DENY) == 2
