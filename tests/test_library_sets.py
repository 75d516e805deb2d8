from __future__ import annotations

from pathlib import Path
import json
import tempfile
import textwrap
import unittest

from libimport.config_loader import load_config_file, normalize_string_list
from libimport.environment import SdkEnvironment, build_context
from libimport.errors import LibrarySetError
from libimport.library_sets import DEFAULT_LIBRARY_SET, load_definition, resolve_library_set


class LibrarySetTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.target = self.root / "plugin"
        self.sdk = SdkEnvironment(root=Path("/opt/android-sdk"))
        self.context = build_context(sdk=self.sdk, target_dir=self.target, env={"HOME": "/home/dev"})

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _resolve(self, name: str | None = None, **kwargs):
        key, definition = load_definition(name)
        return resolve_library_set(key, definition, target_dir=self.target, context=self.context, **kwargs)

    def test_default_set_chains_three_libraries(self) -> None:
        library_set = self._resolve()

        self.assertEqual(library_set.name, DEFAULT_LIBRARY_SET)
        names = [library.name for library in library_set.libraries]
        self.assertEqual(names, ["appcompat_lib", "mediarouter_lib", "google-play-services_lib"])
        appcompat, mediarouter, play_services = library_set.libraries
        self.assertEqual(appcompat.source_path, Path("/opt/android-sdk/extras/android/support/v7/appcompat"))
        self.assertEqual(appcompat.target_path, self.target / "appcompat_lib")
        self.assertEqual(mediarouter.depends_on, ("../appcompat_lib",))
        self.assertEqual(play_services.depends_on, ())
        self.assertIsNone(play_services.api_version)

    def test_single_set_pins_api_version(self) -> None:
        library_set = self._resolve("play-services-single")
        self.assertEqual(len(library_set.libraries), 1)
        self.assertEqual(library_set.libraries[0].api_version, 19)

    def test_api_version_override_only_applies_to_pinned_libraries(self) -> None:
        single = self._resolve("play-services-single", api_version=17)
        chained = self._resolve(api_version=17)

        self.assertEqual(single.libraries[0].api_version, 17)
        self.assertTrue(all(library.api_version is None for library in chained.libraries))

    def test_unknown_set_raises(self) -> None:
        with self.assertRaises(LibrarySetError):
            load_definition("does-not-exist")

    def test_dependency_must_be_listed_first(self) -> None:
        definition = {
            "libraries": [
                {"name": "b", "source": "{{sdk.root}}/b", "target": "b", "depends_on": ["a"]},
                {"name": "a", "source": "{{sdk.root}}/a", "target": "a"},
            ]
        }
        with self.assertRaises(LibrarySetError):
            resolve_library_set("custom", definition, target_dir=self.target, context=self.context)

    def test_unknown_placeholder_raises(self) -> None:
        definition = {"libraries": [{"name": "a", "source": "{{sdk.missing}}/a", "target": "a"}]}
        with self.assertRaises(LibrarySetError):
            resolve_library_set("custom", definition, target_dir=self.target, context=self.context)

    def test_missing_fields_and_duplicates(self) -> None:
        with self.assertRaises(LibrarySetError):
            resolve_library_set("custom", {"libraries": [{"name": "a"}]}, target_dir=self.target, context=self.context)
        with self.assertRaises(LibrarySetError):
            resolve_library_set("custom", {"libraries": []}, target_dir=self.target, context=self.context)
        duplicate = {"name": "a", "source": "/src/a", "target": "a"}
        with self.assertRaises(LibrarySetError):
            resolve_library_set(
                "custom", {"libraries": [duplicate, duplicate]}, target_dir=self.target, context=self.context
            )

    def test_toml_definition_with_toolchain_and_nested_targets(self) -> None:
        path = self.root / "support.toml"
        path.write_text(
            textwrap.dedent(
                """
                reference_prefix = "android.library.reference"

                [toolchain]
                release = ["ant", "debug", "-f", "{{library.build_file}}"]

                [[libraries]]
                name = "core"
                source = "{{env.HOME}}/sdk/core"
                target = "libs/core"

                [[libraries]]
                name = "ui"
                source = "{{sdk.root}}/ui"
                target = "ui"
                depends_on = "core"
                """
            )
        )
        name, definition = load_definition(path=path)
        library_set = resolve_library_set(name, definition, target_dir=self.target, context=self.context)

        self.assertEqual(name, "support")
        core, ui = library_set.libraries
        self.assertEqual(core.source_path, Path("/home/dev/sdk/core"))
        self.assertEqual(core.target_path, self.target / "libs" / "core")
        self.assertEqual(ui.depends_on, ("../libs/core",))
        self.assertEqual(library_set.toolchain.release, ("ant", "debug", "-f", "{{library.build_file}}"))
        self.assertEqual(library_set.toolchain.clean[:2], ("ant", "clean"))

    def test_yaml_and_json_definitions(self) -> None:
        yaml_path = self.root / "set.yaml"
        yaml_path.write_text(
            textwrap.dedent(
                """
                libraries:
                  - name: only
                    source: "{{sdk.root}}/only"
                    target: only
                    api_version: "21"
                """
            )
        )
        json_path = self.root / "set.json"
        json_path.write_text(json.dumps({"libraries": [{"name": "only", "source": "/x", "target": "only"}]}))

        yaml_set = resolve_library_set(
            "set", load_config_file(yaml_path), target_dir=self.target, context=self.context
        )
        json_set = resolve_library_set(
            "set", load_config_file(json_path), target_dir=self.target, context=self.context
        )

        self.assertEqual(yaml_set.libraries[0].api_version, 21)
        self.assertEqual(json_set.libraries[0].source_path, Path("/x"))

    def test_invalid_toolchain_raises(self) -> None:
        definition = {
            "libraries": [{"name": "a", "source": "/a", "target": "a"}],
            "toolchain": {"update": "android update"},
        }
        with self.assertRaises(LibrarySetError):
            resolve_library_set("custom", definition, target_dir=self.target, context=self.context)

    def test_unknown_toolchain_placeholder_raises(self) -> None:
        definition = {
            "libraries": [{"name": "a", "source": "/a", "target": "a"}],
            "toolchain": {"clean": ["ant", "{{library.typo}}"]},
        }
        with self.assertRaises(LibrarySetError) as ctx:
            resolve_library_set("custom", definition, target_dir=self.target, context=self.context)
        self.assertIn("library.typo", str(ctx.exception))


class ConfigLoaderTests(unittest.TestCase):
    def test_unsupported_extension(self) -> None:
        with self.assertRaises(ValueError):
            load_config_file(Path("libraries.ini"))

    def test_root_must_be_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "list.json"
            path.write_text("[1, 2]")
            with self.assertRaises(TypeError):
                load_config_file(path)

    def test_normalize_string_list(self) -> None:
        self.assertEqual(normalize_string_list(None), [])
        self.assertEqual(normalize_string_list(" core "), ["core"])
        self.assertEqual(normalize_string_list(["a", " ", "b"]), ["a", "b"])
        with self.assertRaises(TypeError):
            normalize_string_list([1], field_name="depends_on")


if __name__ == "__main__":
    unittest.main()
