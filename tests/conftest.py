"""Pytest configuration for the hcl2go test suite."""

import sys
from pathlib import Path

import pytest

# Add the repository root to the path for package imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hcl2go.model import (  # noqa: E402
    STRING,
    Attribute,
    Literal,
    ObjectType,
    Package,
    Program,
    Resource,
)


@pytest.fixture
def bucket_program() -> Program:
    """One aws v2 bucket with a single string input."""
    return Program(
        [
            Resource(
                "site",
                "aws:s3/bucket:Bucket",
                [Attribute("acl", Literal("public-read", typ=STRING))],
                ObjectType((("acl", STRING),)),
            )
        ],
        [Package("aws", 2)],
    )
