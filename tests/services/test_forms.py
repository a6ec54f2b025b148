"""Tests for FormService result wrapping and persistence."""

from __future__ import annotations

import json
from pathlib import Path

from formctl.config.settings import FormctlSettings
from formctl.domain.types import MoveDirection, RuleKind
from formctl.services.forms import FormService
from formctl.services.workspace import Workspace
from tests.conftest import rule


def _reload(workspace: Workspace) -> Workspace:
    """A fresh workspace over the same state file, as the next CLI call would see it."""
    return Workspace(workspace.settings)


def _add(svc: FormService, field_type: str, name: str, **kwargs: object) -> dict[str, object]:
    result = svc.add_field(field_type, name, **kwargs)  # type: ignore[arg-type]
    assert result.ok, result.error
    return result.data


class TestForms:
    def test_new_form_persists(self, workspace: Workspace) -> None:
        result = FormService(workspace).new_form("Contact", "Reach us")
        assert result.ok
        assert result.op == "new_form"
        assert workspace.storage.exists()

        reloaded = _reload(workspace).store
        assert reloaded.form.name == "Contact"
        assert reloaded.form.id == result.data["id"]

    def test_show(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        data = svc.show().data
        assert [f["name"] for f in data["fields"]] == ["a"]
        assert data["groups"] == []

    def test_list_and_load(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        first = svc.new_form("First").data["id"]
        svc.save()
        svc.new_form("Second")
        svc.save()
        items = svc.list_forms().data["items"]
        assert [i["name"] for i in items] == ["First", "Second"]
        assert [i["current"] for i in items] == [False, True]

        result = FormService(_reload(workspace)).load(first)
        assert result.ok
        assert _reload(workspace).store.form.name == "First"

    def test_save_is_the_only_way_into_saved_forms(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        assert _reload(workspace).store.saved_forms == []
        svc.save()
        saved = _reload(workspace).store.saved_forms
        assert [f.name for f in saved[0].data.fields] == ["a"]

    def test_replacing_unsaved_form_warns(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        svc.rename("Draft")
        assert svc.new_form("Blank").warnings == []
        _add(svc, "string", "a")
        result = svc.new_form("Other")
        assert result.warnings == ["Unsaved changes to 'Blank' were discarded"]
        svc.save()
        assert svc.apply_template("contact").warnings == []

    def test_post_save_only_on_save(self, workspace: Workspace) -> None:
        calls: list[str] = []

        class _Plugins:
            def dispatch(self, hook_name: str, **payload: object) -> bool:
                calls.append(hook_name)
                return True

        workspace.plugins = _Plugins()  # type: ignore[assignment]
        svc = FormService(workspace)
        _add(svc, "string", "a")
        assert "post_save" not in calls
        svc.save()
        assert calls.count("post_save") == 1

    def test_load_and_delete_unknown(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        assert svc.load("missing").error.code == "NOT_FOUND"
        assert svc.delete("missing").error.code == "NOT_FOUND"

    def test_rename(self, workspace: Workspace) -> None:
        result = FormService(workspace).rename("Survey")
        assert result.data["name"] == "Survey"

    def test_import(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        payload = json.dumps([{"type": "string", "name": "x"}, {"type": "email", "name": "y"}])
        result = svc.import_json(payload)
        assert result.ok
        assert result.data["fields"] == 2
        bad = svc.import_json("{oops")
        assert not bad.ok
        assert bad.error.code == "INVALID_JSON"

    def test_template(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        result = svc.apply_template("registration")
        assert result.ok
        assert result.data["fields"] == 5
        assert svc.apply_template("nope").error.code == "NOT_FOUND"


class TestFields:
    def test_add_merges_default_config(self, workspace: Workspace) -> None:
        data = _add(FormService(workspace), "string", "a", config={"required": True})
        assert data["config"] == {"required": True, "minLength": 0, "maxLength": 255}

    def test_add_unknown_type_warns(self, workspace: Workspace) -> None:
        result = FormService(workspace).add_field("hologram", "h")
        assert result.ok
        assert "Unknown field type 'hologram'" in result.warnings[0]

    def test_add_duplicate(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        result = svc.add_field("string", "a")
        assert not result.ok
        assert result.error.code == "DUPLICATE_NAME"
        assert result.error.detail == {"name": "a"}

    def test_add_into_group_by_name(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        group_id = svc.add_group("contact").data["id"]
        assert _add(svc, "email", "e", group="contact")["group_id"] == group_id
        assert svc.add_field("email", "f", group="nope").error.code == "NOT_FOUND"

    def test_update_by_name(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        result = svc.update_field("a", name="b", label="B", config={"maxLength": None, "hint": "x"})
        assert result.ok
        assert result.data["name"] == "b"
        assert result.data["config"] == {"required": False, "minLength": 0, "hint": "x"}

    def test_update_unknown(self, workspace: Workspace) -> None:
        assert FormService(workspace).update_field("zz", label="x").error.code == "NOT_FOUND"

    def test_remove_refuses_with_dependents(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "country")
        _add(svc, "string", "tax")
        assert svc.set_rule("tax", RuleKind.SHOW_WHEN, rule("country", "equals", "TR")).ok

        refused = svc.remove_field("country")
        assert refused.error.code == "INVALID_INPUT"
        forced = svc.remove_field("country", force=True)
        assert forced.ok
        assert forced.warnings

    def test_set_rule_rejects_cycle(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        _add(svc, "string", "b")
        assert svc.set_rule("a", RuleKind.SHOW_WHEN, rule("b", "isEmpty")).ok
        result = svc.set_rule("b", RuleKind.HIDE_WHEN, rule("a", "isEmpty"))
        assert result.error.code == "CIRCULAR_REFERENCE"
        assert _reload(workspace).store.form.field_by_name("b").config.get("hideWhen") is None

    def test_set_rule_errors(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        assert svc.set_rule("a", RuleKind.SHOW_WHEN, {"field": "a"}).error.code == "INVALID_INPUT"
        missing = svc.set_rule("a", RuleKind.SHOW_WHEN, rule("ghost", "isEmpty"))
        assert missing.error.code == "NOT_FOUND"

    def test_clear_rule(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        _add(svc, "string", "b")
        svc.set_rule("b", RuleKind.DISABLE_WHEN, rule("a", "isEmpty"))
        result = svc.set_rule("b", RuleKind.DISABLE_WHEN, None)
        assert "disableWhen" not in result.data["config"]

    def test_move(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        for name in ("a", "b", "c"):
            _add(svc, "string", name)
        assert svc.move_field("c", direction=MoveDirection.UP).data["order"] == 1
        assert svc.move_field("c", to_index=0).data["order"] == 0
        boundary = svc.move_field("c", direction=MoveDirection.UP)
        assert boundary.ok
        assert boundary.warnings == ["Field 'c' is already at the boundary"]

    def test_move_between_groups(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        group_id = svc.add_group("g").data["id"]
        assert svc.move_field("a", group="g").data["group_id"] == group_id
        assert svc.move_field("a", ungroup=True).data["group_id"] is None

    def test_duplicate(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a", label="A")
        data = svc.duplicate_field("a").data
        assert (data["name"], data["label"], data["order"]) == ("a_copy", "A (Copy)", 1)
        assert svc.duplicate_field("ghost").error.code == "NOT_FOUND"

    def test_cut_and_paste_into_group(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        svc.add_group("contact")
        _add(svc, "email", "email")
        assert svc.copy_field("email", cut=True).op == "cut_field"
        svc = FormService(_reload(workspace))
        pasted = svc.paste_field("contact")
        assert pasted.ok
        assert pasted.data["name"] == "email_paste"
        assert pasted.data["group_id"] == svc.show().data["groups"][0]["id"]
        assert svc.paste_field("nope").error.code == "NOT_FOUND"

    def test_paste_without_clipboard(self, workspace: Workspace) -> None:
        assert FormService(workspace).paste_field().error.code == "NOT_FOUND"

    def test_list_fields(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        svc.add_group("g")
        _add(svc, "string", "a", group="g")
        _add(svc, "string", "b")
        data = svc.list_fields().data
        assert data["count"] == 2
        assert data["buckets"][0]["group"] is None
        assert data["buckets"][1]["group"]["name"] == "g"


class TestGroupsAndValidators:
    def test_remove_group_reports_detached(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        svc.add_group("g")
        _add(svc, "string", "a", group="g")
        result = svc.remove_group("g")
        assert result.data["detached"] == ["a"]
        assert svc.remove_group("g").error.code == "NOT_FOUND"

    def test_validator_lifecycle(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "password", "password")
        result = svc.add_validator("match", "fieldsMatch", ["password", "confirm"], message="No")
        assert result.ok
        assert result.warnings == ["Unknown fields: confirm"]
        assert svc.remove_validator("match").ok
        assert svc.remove_validator("match").error.code == "NOT_FOUND"

    def test_update_group(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        svc.add_group("contact")
        result = svc.update_group("contact", {"label": "İletişim", "collapsible": True})
        assert result.ok
        assert result.data["label"] == "İletişim"
        group = _reload(workspace).store.groups[0]
        assert group.collapsible is True
        assert svc.update_group("contact", {"colour": "red"}).error.code == "INVALID_INPUT"
        assert svc.update_group("contact", {}).error.code == "INVALID_INPUT"
        assert svc.update_group("ghost", {"label": "x"}).error.code == "NOT_FOUND"

    def test_update_validator(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "email", "email")
        svc.add_validator("contact", "atLeastOne", ["email"])
        result = svc.update_validator("contact", {"fields": ["email", "phone"], "message": "x"})
        assert result.ok
        assert result.warnings == ["Unknown fields: phone"]
        validator = _reload(workspace).store.cross_validators[0]
        assert validator.message.tr == validator.message.en == "x"
        assert svc.update_validator("ghost", {"name": "y"}).error.code == "NOT_FOUND"

    def test_invalid_validator(self, workspace: Workspace) -> None:
        result = FormService(workspace).add_validator("m", "fieldsMatch", ["a"])
        assert result.error.code == "INVALID_INPUT"


class TestEditing:
    def test_undo_redo(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "string", "a")
        result = FormService(_reload(workspace)).undo()
        assert result.ok
        assert result.data["redo_depth"] == 1
        assert _reload(workspace).store.fields == []
        assert FormService(_reload(workspace)).redo().data["fields"] == 1

    def test_nothing_to_redo(self, workspace: Workspace) -> None:
        result = FormService(workspace).redo()
        assert result.error.code == "INVALID_INPUT"
        assert not workspace.session_storage.exists()

    def test_update_settings(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        result = svc.update_settings({"labelPosition": "left", "validate_on_change": True})
        assert result.ok
        assert result.data["labelPosition"] == "left"
        settings = _reload(workspace).store.settings
        assert settings.validate_on_change is True
        assert svc.update_settings({"size": "huge"}).error.code == "INVALID_INPUT"
        assert svc.update_settings({}).error.code == "INVALID_INPUT"

    def test_clear_fields(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        svc.apply_template("registration")
        svc.add_group("extra")
        data = svc.clear_fields().data
        assert data == {"fields": 5, "groups": 1, "validators": 0}
        assert _reload(workspace).store.fields == []

    def test_preferences(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        assert svc.set_preferences().data == {"theme": "dark", "language": "tr"}
        assert svc.set_preferences(language="en").ok
        store = _reload(workspace).store
        assert store.language == "en"
        assert svc.set_preferences(theme="sepia").error.code == "INVALID_INPUT"


class TestPreview:
    def test_preview(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "number", "price")
        _add(svc, "number", "qty")
        _add(svc, "calculated", "total", config={"formula": "{price} * {qty}"})
        _add(svc, "string", "discount")
        svc.set_rule("discount", RuleKind.SHOW_WHEN, rule("total", "greaterThan", 100))

        low = svc.preview({"price": 10, "qty": 2}).data
        assert low["values"]["total"] == 20.0
        assert "discount" not in low["visible"]
        high = svc.preview({"price": 60, "qty": 2}).data
        assert "discount" in high["visible"]

    def test_errors_for_visible_fields_only(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        svc.set_preferences(language="en")
        _add(svc, "string", "kind")
        _add(svc, "string", "name", config={"required": True})
        _add(svc, "vkn", "tax_id", config={"required": True})
        svc.set_rule("tax_id", RuleKind.SHOW_WHEN, rule("kind", "equals", "company"))

        result = svc.preview({"kind": "person"})
        assert result.data["errors"] == {"name": "This field is required"}
        assert result.data["valid"] is False

        shown = svc.preview({"kind": "company", "name": "Ada", "tax_id": "1234567891"}).data
        assert shown["errors"] == {"tax_id": "Invalid VKN number"}

        ok = svc.preview({"kind": "company", "name": "Ada", "tax_id": "1234567890"}).data
        assert ok["errors"] == {}
        assert ok["valid"] is True

    def test_cross_validators(self, workspace: Workspace) -> None:
        svc = FormService(workspace)
        _add(svc, "password", "password")
        _add(svc, "password", "confirm")
        svc.add_validator("match", "fieldsMatch", ["password", "confirm"], message="No")
        svc.add_validator("rule", "custom", ["password"], expression="values.password != ''")

        result = svc.preview({"password": "Secret1!", "confirm": "Secret2!"})
        assert result.data["cross_errors"] == {"match": "No"}
        assert result.data["valid"] is False
        assert result.warnings == ["Custom validator 'rule' was not evaluated"]

        same = svc.preview({"password": "Secret1!", "confirm": "Secret1!"}).data
        assert same["cross_errors"] == {}


class TestWorkspaceDefaults:
    def test_editor_defaults_apply_without_state(self, workspace_root: Path) -> None:
        (workspace_root / "formctl.toml").write_text('[editor]\nlanguage = "en"\n')
        settings = FormctlSettings.from_cli(workspace_root=workspace_root)
        ws = Workspace(settings)
        assert ws.store.language == "en"
        assert ws.store.history.max_entries == 50
