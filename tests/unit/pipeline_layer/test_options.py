"""
Unit Tests for Command Options

Tests option expansion to wire tokens and family checks.
"""

import dataclasses

import pytest

from kvpipe.pipeline.options import (
    ExpireGT,
    ExpireLT,
    ExpireNX,
    ExpireOption,
    ExpireXX,
    FlushAllAsync,
    FlushAllSync,
    SetEX,
    SetGet,
    SetKeepTTL,
    SetNX,
    SetOption,
    SetPX,
    SetXX,
    XAddMaxLen,
    XAddNoMkStream,
    XGroupCreateMkStream,
    XReadGroupBlock,
    XReadGroupCount,
    XReadGroupNoAck,
    expand_options,
)


@pytest.mark.unit
class TestOptionTokens:
    """Test each variant's wire tokens."""

    @pytest.mark.parametrize(
        "option, tokens",
        [
            (SetEX(10), ["EX", 10]),
            (SetPX(1500), ["PX", 1500]),
            (SetNX(), ["NX"]),
            (SetXX(), ["XX"]),
            (SetKeepTTL(), ["KEEPTTL"]),
            (SetGet(), ["GET"]),
            (ExpireNX(), ["NX"]),
            (ExpireXX(), ["XX"]),
            (ExpireGT(), ["GT"]),
            (ExpireLT(), ["LT"]),
            (FlushAllAsync(), ["ASYNC"]),
            (FlushAllSync(), ["SYNC"]),
            (XAddNoMkStream(), ["NOMKSTREAM"]),
            (XAddMaxLen(1000), ["MAXLEN", "=", 1000]),
            (XAddMaxLen(1000, approximate=True), ["MAXLEN", "~", 1000]),
            (XGroupCreateMkStream(), ["MKSTREAM"]),
            (XReadGroupCount(5), ["COUNT", 5]),
            (XReadGroupBlock(250), ["BLOCK", 250]),
            (XReadGroupNoAck(), ["NOACK"]),
        ],
    )
    def test_to_args(self, option, tokens):
        """Test token expansion."""
        assert option.to_args() == tokens

    def test_options_are_immutable(self):
        """Test that option variants are frozen values."""
        option = SetEX(10)
        with pytest.raises(dataclasses.FrozenInstanceError):
            option.seconds = 20

    def test_options_compare_by_value(self):
        """Test value equality of variants."""
        assert SetEX(10) == SetEX(10)
        assert SetEX(10) != SetPX(10)


@pytest.mark.unit
class TestExpandOptions:
    """Test flattening option sequences."""

    def test_order_preserved(self):
        """Test that tokens follow the order options were given."""
        assert expand_options(SetOption, [SetNX(), SetEX(5), SetGet()]) == ["NX", "EX", 5, "GET"]

    def test_empty(self):
        """Test no options produce no tokens."""
        assert expand_options(SetOption, []) == []

    def test_wrong_family_rejected(self):
        """Test that an option from another command is a TypeError."""
        with pytest.raises(TypeError, match="ExpireNX is not a SetOption"):
            expand_options(SetOption, [ExpireNX()])

    def test_non_option_rejected(self):
        """Test that plain strings are not accepted as options."""
        with pytest.raises(TypeError):
            expand_options(ExpireOption, ["NX"])
