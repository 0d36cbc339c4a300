# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from src.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants and strategy registry."""

    def test_strategy_timeout_positive(self) -> None:
        """STRATEGY_TIMEOUT must be a positive number."""
        self.assertIsInstance(Settings.STRATEGY_TIMEOUT, float)
        self.assertGreater(Settings.STRATEGY_TIMEOUT, 0)

    def test_pacing_delay_range(self) -> None:
        """PACING_DELAY is an ordered two-to-three second range."""
        low, high = Settings.PACING_DELAY
        self.assertEqual((low, high), (2.0, 3.0))
        self.assertLessEqual(low, high)

    def test_name_length_limit(self) -> None:
        """Product names are capped at 100 characters."""
        self.assertEqual(Settings.MAX_PRODUCT_NAME_LENGTH, 100)

    def test_recent_logs_limit(self) -> None:
        """The default recent-log window is 100 entries."""
        self.assertEqual(Settings.RECENT_LOGS_LIMIT, 100)

    def test_request_delay_is_positive_float(self) -> None:
        """REQUEST_DELAY must be a positive number."""
        self.assertIsInstance(Settings.REQUEST_DELAY, float)
        self.assertGreater(Settings.REQUEST_DELAY, 0)

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_max_retries_is_positive(self) -> None:
        """MAX_RETRIES must be >= 1."""
        self.assertGreaterEqual(Settings.MAX_RETRIES, 1)

    def test_circuit_breaker_threshold_positive(self) -> None:
        """CIRCUIT_BREAKER_THRESHOLD must be >= 1."""
        self.assertGreaterEqual(
            Settings.CIRCUIT_BREAKER_THRESHOLD, 1
        )

    def test_catalog_threshold_is_fraction(self) -> None:
        """CATALOG_MATCH_THRESHOLD lies in (0, 1]."""
        self.assertGreater(Settings.CATALOG_MATCH_THRESHOLD, 0)
        self.assertLessEqual(Settings.CATALOG_MATCH_THRESHOLD, 1)

    def test_each_strategy_has_required_keys(self) -> None:
        """Every strategy must have id, label, and strategy keys."""
        for entry in Settings.AVAILABLE_STRATEGIES:
            with self.subTest(entry=entry.get("id", "?")):
                self.assertIn("id", entry)
                self.assertIn("label", entry)
                self.assertIn("strategy", entry)

    def test_strategy_ids_are_unique(self) -> None:
        """No duplicate strategy ids."""
        ids = [s["id"] for s in Settings.AVAILABLE_STRATEGIES]
        self.assertEqual(len(ids), len(set(ids)))

    def test_structured_sites_are_registered(self) -> None:
        """Every structured-data site has a registry entry."""
        ids = {s["id"] for s in Settings.AVAILABLE_STRATEGIES}
        for site in Settings.STRUCTURED_DATA_SITES:
            self.assertIn(site, ids)

    def test_structured_sites_have_query_placeholder(self) -> None:
        """Search URLs are templates over ``{query}``."""
        for site, conf in Settings.STRUCTURED_DATA_SITES.items():
            with self.subTest(site=site):
                self.assertIn("{query}", conf["search_url"])
                self.assertTrue(conf["product_link"])

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.CATALOG_PATH, Path)
        self.assertIsInstance(Settings.RESULTS_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_catalog_path_exists(self) -> None:
        """The bundled catalog.json must exist on disk."""
        self.assertTrue(Settings.CATALOG_PATH.exists())

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(
            Settings.IMPERSONATE_BROWSER, str
        )
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)

    def test_default_headers_has_accept_language(self) -> None:
        """DEFAULT_HEADERS must include Accept-Language."""
        self.assertIn(
            "Accept-Language", Settings.DEFAULT_HEADERS
        )


if __name__ == "__main__":
    unittest.main()
