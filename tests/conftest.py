from __future__ import annotations

import pytest

from factories import build_services, new_repository


@pytest.fixture
def repository():
    return new_repository()


@pytest.fixture
def services(repository):
    return build_services(repository)
