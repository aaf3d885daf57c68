"""Tests for audit middleware helpers."""

import logging

import pytest

from inspectra.api.middleware.audit import determine_level, extract_resource_info


class TestExtractResourceInfo:
    @pytest.mark.parametrize("path,expected", [
        ("/api/trips", ("trips", None)),
        ("/api/trips/TRIP-1", ("trips", "TRIP-1")),
        ("/api/trips/TRIP-1/book", ("trips", "TRIP-1")),
        ("/api/approvals/trip/TRIP-1/approve", ("trip", "TRIP-1")),
        ("/api/approvals/pending", ("pending", None)),
        ("/api/approvals/report/batch/reject", ("report", None)),
        ("/api/reports/assign", ("reports", None)),
        ("/", ("api", None)),
    ])
    def test_paths(self, path, expected):
        assert extract_resource_info(path) == expected


class TestDetermineLevel:
    def test_levels(self):
        assert determine_level(500, "GET") == logging.ERROR
        assert determine_level(409, "POST") == logging.WARNING
        assert determine_level(200, "POST") == logging.INFO
        assert determine_level(200, "GET") == logging.DEBUG
