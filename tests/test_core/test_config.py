"""Unit tests for the configuration loader.

Tests cover:
- Rule loading: order, bare-list rules, pass-through keys
- Validation: ConfigError on missing/invalid files and rules
- Header flag parsing
"""

import tempfile
import textwrap
import unittest
from pathlib import Path

from qsfuzz.core.config import load_config, parse_config, parse_headers
from qsfuzz.core.exceptions import ConfigError


class TestLoadConfig(unittest.TestCase):
    """Test load_config."""
    
    def setUp(self):
        """Create temporary directory for each test."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self.temp_dir.name) / "rules.yaml"
    
    def tearDown(self):
        """Clean up temporary directory."""
        self.temp_dir.cleanup()
    
    def _write(self, content: str) -> Path:
        self.config_path.write_text(textwrap.dedent(content))
        return self.config_path
    
    def test_loads_rules_in_file_order(self):
        """Test that rules and injections keep their file order."""
        path = self._write("""
            cookies: "session=abc"
            headers:
              X-Test: 1
            rules:
              OpenRedirect:
                description: Redirect to attacker host
                injections:
                  - "https://evil.example/[[domain]]"
                  - "//evil.example"
                expectations:
                  - "Location: https://evil.example"
              XSS:
                injections:
                  - "'\\"><x>"
        """)
        
        config = load_config(path)
        
        self.assertEqual([rule.name for rule in config.rules], ["OpenRedirect", "XSS"])
        self.assertEqual(config.injections, [
            "https://evil.example/[[domain]]",
            "//evil.example",
            "'\"><x>",
        ])
        self.assertEqual(config.rules[0].description, "Redirect to attacker host")
        self.assertEqual(
            config.rules[0].extra,
            {"expectations": ["Location: https://evil.example"]},
        )
        self.assertEqual(config.cookies, "session=abc")
        self.assertEqual(config.headers, {"X-Test": "1"})
    
    def test_bare_list_rule(self):
        """Test that a rule may be a plain list of injections."""
        path = self._write("""
            rules:
              Simple:
                - one
                - 2
        """)
        
        config = load_config(path)
        
        self.assertEqual(config.rules[0].injections, ["one", "2"])
        self.assertIsNone(config.rules[0].description)
    
    def test_rule_for_finds_declaring_rule(self):
        """Test that injections can be mapped back to their rule."""
        config = parse_config({"rules": {"A": ["x"], "B": ["y"]}})
        
        self.assertEqual(config.rule_for("y").name, "B")
        self.assertIsNone(config.rule_for("z"))
    
    def test_missing_file_raises(self):
        with self.assertRaises(ConfigError):
            load_config(Path(self.temp_dir.name) / "missing.yaml")
    
    def test_invalid_yaml_raises(self):
        with self.assertRaises(ConfigError):
            load_config(self._write("rules: [unclosed"))
    
    def test_empty_file_raises(self):
        with self.assertRaises(ConfigError):
            load_config(self._write(""))
    
    def test_invalid_configurations_raise(self):
        """Test that malformed rule sections raise ConfigError."""
        invalid = [
            ["not", "a", "mapping"],
            {"cookies": "a=b"},
            {"rules": {}},
            {"rules": ["x"]},
            {"rules": {"A": "just a string"}},
            {"rules": {"A": {"description": "no injections"}}},
            {"rules": {"A": {"injections": []}}},
            {"rules": {"A": {"injections": "abc"}}},
            {"rules": {"A": {"injections": [{"nested": 1}]}}},
            {"rules": {"A": ["x"]}, "headers": ["X: 1"]},
            {"rules": {"A": ["x"]}, "cookies": 5},
        ]
        
        for data in invalid:
            with self.subTest(data=data):
                with self.assertRaises(ConfigError):
                    if isinstance(data, dict):
                        parse_config(data)
                    else:
                        self.config_path.write_text(str(data))
                        load_config(self.config_path)


class TestParseHeaders(unittest.TestCase):
    """Test parse_headers."""
    
    def test_parses_multiple_headers(self):
        self.assertEqual(
            parse_headers("A: 1;B:2; C : 3"),
            {"A": "1", "B": "2", "C": "3"},
        )
    
    def test_value_may_contain_colon(self):
        self.assertEqual(
            parse_headers("Referer: http://example.com"),
            {"Referer": "http://example.com"},
        )
    
    def test_parts_without_colon_are_skipped(self):
        self.assertEqual(parse_headers("A:1;junk"), {"A": "1"})
    
    def test_no_colon_raises(self):
        with self.assertRaises(ConfigError):
            parse_headers("no colon here")


if __name__ == "__main__":
    unittest.main()
