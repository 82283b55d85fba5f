"""
Test suite for unit counters.

System role: Verification of chunk size functions
"""

from unittest.mock import MagicMock, patch

from regulex.configs import ChunkingSettings
from regulex.core.document_processing.units import TiktokenCounter, build_unit_counter, count_words


class TestUnitCounters:
    """Test suite for count_words() and build_unit_counter()."""

    def test_count_words_should_split_on_any_whitespace(self) -> None:
        assert count_words("The rate\tis\n 24%.  ") == 4
        assert count_words("") == 0

    def test_words_should_be_the_default_unit(self) -> None:
        assert build_unit_counter(ChunkingSettings()) is count_words

    def test_tiktoken_counter_should_load_encoding_once(self) -> None:
        # Arrange
        encoding = MagicMock()
        encoding.encode.return_value = [1, 2, 3]
        counter = build_unit_counter(ChunkingSettings(unit_counter="tiktoken"))

        # Act
        with patch("regulex.core.document_processing.units.tiktoken.get_encoding", return_value=encoding) as load:
            first = counter("The rate is 24%.")
            second = counter("Rs. 50,000")

        # Assert
        assert isinstance(counter, TiktokenCounter)
        assert (first, second) == (3, 3)
        load.assert_called_once_with("cl100k_base")
