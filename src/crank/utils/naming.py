"""Name derivation for bundles and build artifacts."""

from __future__ import annotations

import re

# Acronym before a capitalised word, capitalised/lowercase word, acronym.
_WORD_RE = re.compile(r"[A-Z0-9]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z0-9]+")


def title_case(identifier: str) -> str:
    """Word-case a target identifier into a display title.

    ``hello_world``, ``hello-world`` and ``helloWorld`` all become
    ``Hello World``. Pure and deterministic; the result names the staging
    directory, the ``.pdx`` bundle and the release archive.
    """
    words = _WORD_RE.findall(identifier)
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def artifact_stem(identifier: str) -> str:
    """File stem Cargo uses for a crate or example's library artifacts."""
    return identifier.replace("-", "_")
