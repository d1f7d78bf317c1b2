"""
dagpush.publish.extract — Recover an image ID from daemon load output.

`docker load` does not report its result in a typed field; depending on
the daemon version and on whether the archive carried a tag, the output
reads either

    Loaded image: registry.example.com/hello:v1
    Loaded image ID: sha256:3f1c0e9d2b7a...

Lines are scanned top to bottom and the first usable one wins.
"""

from __future__ import annotations


LOADED_IMAGE_MARKER = "Loaded image:"
DIGEST_PREFIX = "sha256:"
SHORT_DIGEST_LEN = 12


def extract_image_id(load_output: str) -> str:
    """Return the loaded image reference, or "" if none can be found.

    A "Loaded image:" line yields everything after the label, colons
    included, so `Loaded image: sha256:<hex>` keeps the full digest.
    Any other line holding "sha256:" yields a short `sha256:<12 hex>`
    ID, provided at least 12 characters follow the prefix.
    """
    for line in load_output.split("\n"):
        if LOADED_IMAGE_MARKER in line:
            parts = line.split(":")
            if len(parts) >= 3:
                return ":".join(parts[1:]).strip()

        if DIGEST_PREFIX in line:
            parts = line.split(DIGEST_PREFIX)
            if len(parts) >= 2:
                digest = parts[1].strip()
                if len(digest) >= SHORT_DIGEST_LEN:
                    return DIGEST_PREFIX + digest[:SHORT_DIGEST_LEN]

    return ""
