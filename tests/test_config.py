"""
Unit tests for GenerationConfig validation and YAML loading.
"""
import os
import tempfile
import unittest

from rest_spec_generator.config import GenerationConfig, load_config
from rest_spec_generator.constants import ALL_OPERATIONS, HandlerTarget, Operation
from rest_spec_generator.errors import DEFAULT_ERROR_RESPONSES
from rest_spec_generator.exceptions import ConfigurationError


class TestPaginationBounds(unittest.TestCase):

    def test_default_clamped_down_to_max(self):
        """min=0, max=5, default=50 normalizes to 1/5/5."""
        config = GenerationConfig(min_items_per_page=0, max_items_per_page=5, items_per_page=50).validate()

        self.assertEqual(config.min_items_per_page, 1)
        self.assertEqual(config.max_items_per_page, 5)
        self.assertEqual(config.items_per_page, 5)

    def test_unset_values_get_defaults(self):
        config = GenerationConfig().validate()

        self.assertEqual(config.min_items_per_page, 1)
        self.assertEqual(config.max_items_per_page, 100)
        self.assertEqual(config.items_per_page, 10)

    def test_max_raised_to_min(self):
        """A max below min is raised; the default follows min up."""
        config = GenerationConfig(min_items_per_page=20, max_items_per_page=10).validate()

        self.assertEqual(config.max_items_per_page, 20)
        self.assertEqual(config.items_per_page, 20)

    def test_negative_values_treated_as_unset(self):
        config = GenerationConfig(min_items_per_page=-3, max_items_per_page=-1, items_per_page=-7).validate()

        self.assertEqual(
            (config.min_items_per_page, config.max_items_per_page, config.items_per_page),
            (1, 100, 10),
        )


class TestDefaults(unittest.TestCase):

    def test_operations_default_to_all(self):
        self.assertEqual(GenerationConfig().validate().default_operations, ALL_OPERATIONS)
        self.assertEqual(GenerationConfig(default_operations=[]).validate().default_operations, ALL_OPERATIONS)

    def test_explicit_operations_kept(self):
        config = GenerationConfig(default_operations=["read", "list"]).validate()
        self.assertEqual(config.default_operations, [Operation.READ, Operation.LIST])

    def test_error_responses_default(self):
        config = GenerationConfig().validate()

        self.assertEqual(set(config.global_error_responses), set(DEFAULT_ERROR_RESPONSES))
        # The defaults are copied, not shared.
        config.global_error_responses[404]["description"] = "changed"
        self.assertNotEqual(DEFAULT_ERROR_RESPONSES[404]["description"], "changed")


class TestRejections(unittest.TestCase):

    def test_non_error_status_rejected(self):
        config = GenerationConfig(global_error_responses={200: {"description": "OK"}})

        with self.assertRaises(ConfigurationError) as ctx:
            config.validate()

        self.assertIn("200", str(ctx.exception))
        self.assertFalse(config.is_validated)

    def test_unknown_handler_rejected(self):
        config = GenerationConfig(handler="chi")

        with self.assertRaises(ConfigurationError):
            config.validate()
        self.assertFalse(config.is_validated)

    def test_known_handler_normalized(self):
        config = GenerationConfig(handler="fastapi").validate()
        self.assertIs(config.handler, HandlerTarget.FASTAPI)
        self.assertTrue(config.has_handler)


class TestTogglesAndIdempotence(unittest.TestCase):

    def test_with_testing_forced_off_without_handler(self):
        config = GenerationConfig(handler="", with_testing=True).validate()
        self.assertFalse(config.with_testing)

    def test_with_testing_kept_with_handler(self):
        config = GenerationConfig(handler="generic", with_testing=True).validate()
        self.assertTrue(config.with_testing)

    def test_second_validate_is_noop(self):
        """Changes made after validation are not re-clamped."""
        config = GenerationConfig(max_items_per_page=50).validate()
        self.assertTrue(config.is_validated)

        config.items_per_page = 1000
        config.with_testing = True
        self.assertIs(config.validate(), config)

        self.assertEqual(config.items_per_page, 1000)
        self.assertTrue(config.with_testing)

    def test_camel_case_aliases(self):
        config = GenerationConfig.model_validate({
            "minItemsPerPage": 2,
            "allowClientUUIDs": True,
            "disablePatchJSONTag": True,
            "globalErrorResponses": {"500": {"description": "boom"}},
        }).validate()

        self.assertEqual(config.min_items_per_page, 2)
        self.assertTrue(config.allow_client_uuids)
        self.assertTrue(config.disable_patch_json_tag)
        self.assertEqual(list(config.global_error_responses), [500])

    def test_validate_is_an_instance_method(self):
        """validate() checks an existing instance; model_validate builds one."""
        config = GenerationConfig.model_validate({"itemsPerPage": 5})
        self.assertFalse(config.is_validated)

        self.assertIs(config.validate(), config)
        self.assertTrue(config.is_validated)
        self.assertEqual(config.items_per_page, 5)

    def test_to_dict_excludes_hooks_and_writer(self):
        config = GenerationConfig(pre_write_hook=lambda doc: None).validate()
        data = config.to_dict()

        self.assertNotIn("preWriteHook", data)
        self.assertNotIn("writer", data)
        self.assertEqual(data["itemsPerPage"], 10)


class TestLoadConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def _write(self, content: str) -> str:
        path = os.path.join(self.tmp.name, "rest.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_loads_and_validates_yaml(self):
        path = self._write(
            "maxItemsPerPage: 25\n"
            "itemsPerPage: 40\n"
            "strictMutate: true\n"
            "defaultOperations: [read, list]\n"
        )

        config = load_config(path)

        self.assertTrue(config.is_validated)
        self.assertEqual(config.items_per_page, 25)
        self.assertTrue(config.strict_mutate)
        self.assertEqual(config.default_operations, [Operation.READ, Operation.LIST])

    def test_overrides_win_and_none_is_ignored(self):
        path = self._write("outputDir: from_file\nhandler: generic\n")

        config = load_config(path, {"outputDir": "from_cli", "handler": None})

        self.assertEqual(config.output_dir, "from_cli")
        self.assertEqual(config.handler, HandlerTarget.GENERIC)

    def test_missing_file_uses_defaults(self):
        config = load_config(os.path.join(self.tmp.name, "absent.yaml"))
        self.assertEqual(config.items_per_page, 10)

    def test_invalid_yaml_raises(self):
        path = self._write("maxItemsPerPage: [1, 2\n")
        with self.assertRaises(ConfigurationError):
            load_config(path)

    def test_schema_errors_reported_with_location(self):
        path = self._write("itemsPerPage: lots\n")

        with self.assertRaises(ConfigurationError) as ctx:
            load_config(path)

        self.assertTrue(any("itemsPerPage" in e for e in ctx.exception.context["errors"]))

    def test_policy_errors_raised(self):
        path = self._write("globalErrorResponses:\n  302:\n    description: moved\n")
        with self.assertRaises(ConfigurationError):
            load_config(path)


if __name__ == "__main__":
    unittest.main()
