"""Integration tests for small sample programs."""

import pytest
from chip8 import run_rom, RunOptions


def rom(*words):
    return b"".join(w.to_bytes(2, "big") for w in words)


def test_sample_draw_hex_digit():
    """Draw glyph for VA using Fx29."""
    code = rom(
        0x6A0A,  # LD VA, 0x0A
        0xFA29,  # LD F, VA
        0x6005,  # LD V0, 5
        0x6103,  # LD V1, 3
        0xD015,  # DRW V0, V1, 5
        0x120A,  # JP 0x20A
    )
    result = run_rom(code, RunOptions(max_steps=6))
    assert result.status == "ok"
    lines = result.screen.splitlines()
    # Glyph A: F0 90 F0 90 90
    assert lines[3][5:9] == "####"
    assert lines[4][5:9] == "#..#"
    assert lines[5][5:9] == "####"
    assert lines[7][5:9] == "#..#"
    assert result.final_state["v"][0xF] == 0


def test_sample_print_decimal():
    """Store BCD of 123 and read the digits back into registers."""
    code = rom(
        0x607B,  # LD V0, 123
        0xA300,  # LD I, 0x300
        0xF033,  # LD B, V0
        0xF265,  # LD V2, [I]
        0x1208,  # JP 0x208
    )
    result = run_rom(code, RunOptions(max_steps=5))
    assert result.final_state["v"][:3] == [1, 2, 3]


def test_sample_countdown_loop():
    """Count V0 down from 5 with a loop and skip."""
    code = rom(
        0x6005,  # 200 LD V0, 5
        0x6101,  # 202 LD V1, 1
        0x3000,  # 204 SE V0, 0
        0x120A,  # 206 JP 0x20A
        0x120E,  # 208 JP 0x20E
        0x8015,  # 20A SUB V0, V1
        0x1204,  # 20C JP 0x204
        0x6201,  # 20E LD V2, 1
        0x1210,  # 210 JP 0x210
    )
    result = run_rom(code, RunOptions(max_steps=200))
    assert result.status == "ok"
    assert result.final_state["v"][0] == 0
    assert result.final_state["v"][2] == 1
    assert result.final_state["pc"] == 0x210


def test_sample_subroutine_add():
    """Call a subroutine twice that adds V1 into V0."""
    code = rom(
        0x6001,  # 200 LD V0, 1
        0x6102,  # 202 LD V1, 2
        0x220C,  # 204 CALL 0x20C
        0x220C,  # 206 CALL 0x20C
        0x120A,  # 208 JP 0x20A
        0x120A,  # 20A JP 0x20A
        0x8014,  # 20C ADD V0, V1
        0x00EE,  # 20E RET
    )
    result = run_rom(code, RunOptions(max_steps=20))
    assert result.status == "ok"
    assert result.final_state["v"][0] == 5
    assert result.final_state["sp"] == 0


def test_sample_delay_timer_wait():
    """Spin until the delay timer expires."""
    code = rom(
        0x6004,  # 200 LD V0, 4
        0xF015,  # 202 LD DT, V0
        0xF107,  # 204 LD V1, DT
        0x3100,  # 206 SE V1, 0
        0x1204,  # 208 JP 0x204
        0x6201,  # 20A LD V2, 1
        0x120C,  # 20C JP 0x20C
    )
    result = run_rom(code, RunOptions(max_steps=30))
    assert result.final_state["v"][2] == 1
    assert result.final_state["dt"] == 0


@pytest.mark.parametrize("key,expected", [(5, 1), (6, 2)])
def test_sample_key_branch(key, expected):
    """Wait for a key and branch on whether it was 5."""
    code = rom(
        0xF00A,  # 200 LD V0, K
        0x4005,  # 202 SNE V0, 5
        0x120A,  # 204 JP 0x20A
        0x6202,  # 206 LD V2, 2
        0x120C,  # 208 JP 0x20C
        0x6201,  # 20A LD V2, 1
        0x120C,  # 20C JP 0x20C
    )
    result = run_rom(code, RunOptions(max_steps=10, keys={3: key}))
    assert result.status == "ok"
    assert result.final_state["v"][0] == key
    assert result.final_state["v"][2] == expected
