"""Title derivation tests - titles name staging dirs, bundles and archives."""

import pytest

from crank.utils import artifact_stem, title_case


class TestTitleCase:
    """Word-casing of target identifiers."""

    @pytest.mark.parametrize(
        "identifier, expected",
        [
            ("hello_world", "Hello World"),
            ("hello-world", "Hello World"),
            ("helloWorld", "Hello World"),
            ("HelloWorld", "Hello World"),
            ("game", "Game"),
            ("my_game_v2", "My Game V2"),
            ("HTTPServer", "Http Server"),
            ("__private__", "Private"),
        ],
    )
    def test_word_casing(self, identifier, expected):
        """Separators and case changes split words; each word is capitalised."""
        assert title_case(identifier) == expected

    def test_deterministic(self):
        """Same identifier always yields the same title."""
        titles = {title_case("sprite_game") for _ in range(10)}
        assert titles == {"Sprite Game"}

    def test_no_words(self):
        """Identifiers without letters or digits produce an empty title."""
        assert title_case("___") == ""


class TestArtifactStem:
    def test_dashes_become_underscores(self):
        assert artifact_stem("hello-world") == "hello_world"
        assert artifact_stem("plain") == "plain"
