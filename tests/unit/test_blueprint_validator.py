"""Unit tests for blueprint validation.

Service output is untrusted: every malformed shape must raise
MalformedBlueprintError, and nothing is defaulted or repaired.
"""

import copy
import json

import pytest

from ebook_studio.models import BookType
from ebook_studio.services.blueprint_validator import strip_code_fences, validate_blueprint
from ebook_studio.services.errors import MalformedBlueprintError


# =============================================================================
# Fence stripping
# =============================================================================


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```\n') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_inner_fence_left_alone(self):
        text = '{"a": "```code```"}'
        assert strip_code_fences(text) == text


# =============================================================================
# Validation
# =============================================================================


class TestValidateBlueprint:
    """Tests for validate_blueprint."""

    def test_valid_document(self, blueprint_data):
        blueprint = validate_blueprint(json.dumps(blueprint_data))

        assert blueprint.title == "The Quiet Engine"
        assert blueprint.book_type == BookType.nonfiction
        assert len(blueprint.chapters) == 3
        assert blueprint.chapters[0].sections[1].title == "Compounding"

    def test_fenced_document(self, blueprint_data):
        raw = f"```json\n{json.dumps(blueprint_data, indent=2)}\n```"
        assert validate_blueprint(raw).title == "The Quiet Engine"

    def test_book_type_case_is_normalized(self, blueprint_data):
        blueprint_data["book_type"] = "  Guide "
        assert validate_blueprint(json.dumps(blueprint_data)).book_type == BookType.guide

    def test_optional_lists_default_to_empty(self, blueprint_data):
        for key in ("research_needs", "media_requirements", "estimated_credits"):
            blueprint_data.pop(key)
        blueprint = validate_blueprint(json.dumps(blueprint_data))
        assert blueprint.research_needs == []
        assert blueprint.media_requirements == []
        assert blueprint.estimated_credits == 0

    def test_extra_fields_ignored(self, blueprint_data):
        blueprint_data["marketing_angle"] = "bold"
        assert validate_blueprint(json.dumps(blueprint_data)).title == "The Quiet Engine"

    @pytest.mark.parametrize("raw", ["", "   ", "\n\n"])
    def test_empty_output(self, raw):
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint(raw)
        assert exc_info.value.issues == ["empty response"]
        assert exc_info.value.code == "MALFORMED_BLUEPRINT"

    def test_invalid_json_inside_fence(self):
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint("```json\n{not valid\n```")
        assert exc_info.value.issues[0].startswith("invalid JSON")

    def test_truncated_json(self, blueprint_data):
        raw = json.dumps(blueprint_data)
        with pytest.raises(MalformedBlueprintError):
            validate_blueprint(raw[: len(raw) // 2])

    def test_surrounding_prose_rejected(self, blueprint_data):
        raw = f"Here is your blueprint:\n{json.dumps(blueprint_data)}\nEnjoy!"
        with pytest.raises(MalformedBlueprintError):
            validate_blueprint(raw)

    def test_array_document_rejected(self, blueprint_data):
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint(json.dumps([blueprint_data]))
        assert "expected a JSON object" in exc_info.value.issues[0]

    def test_unknown_book_type(self, blueprint_data):
        blueprint_data["book_type"] = "cookbook"
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint(json.dumps(blueprint_data))
        assert any(issue.startswith("book_type") for issue in exc_info.value.issues)

    def test_negative_word_count(self, blueprint_data):
        blueprint_data["chapters"][1]["target_word_count"] = -500
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint(json.dumps(blueprint_data))
        assert any("chapters.1.target_word_count" in issue for issue in exc_info.value.issues)

    @pytest.mark.parametrize("value", [True, "5000", 4500.0])
    def test_chapter_word_count_must_be_an_integer(self, blueprint_data, value):
        blueprint_data["chapters"][0]["target_word_count"] = value
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint(json.dumps(blueprint_data))
        assert any("chapters.0.target_word_count" in issue for issue in exc_info.value.issues)

    @pytest.mark.parametrize("value", [False, "500", 12.0])
    def test_estimated_credits_must_be_an_integer(self, blueprint_data, value):
        blueprint_data["estimated_credits"] = value
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint(json.dumps(blueprint_data))
        assert any(issue.startswith("estimated_credits") for issue in exc_info.value.issues)

    def test_zero_section_word_count(self, blueprint_data):
        blueprint_data["chapters"][0]["sections"][0]["target_word_count"] = 0
        with pytest.raises(MalformedBlueprintError):
            validate_blueprint(json.dumps(blueprint_data))

    def test_missing_required_field(self, blueprint_data):
        del blueprint_data["tone"]
        with pytest.raises(MalformedBlueprintError) as exc_info:
            validate_blueprint(json.dumps(blueprint_data))
        assert any(issue.startswith("tone") for issue in exc_info.value.issues)

    def test_empty_subtitle_options(self, blueprint_data):
        blueprint_data["subtitle_options"] = []
        with pytest.raises(MalformedBlueprintError):
            validate_blueprint(json.dumps(blueprint_data))

    def test_no_chapters(self, blueprint_data):
        blueprint_data["chapters"] = []
        with pytest.raises(MalformedBlueprintError):
            validate_blueprint(json.dumps(blueprint_data))

    def test_too_many_chapters(self, blueprint_data):
        chapter = blueprint_data["chapters"][0]
        blueprint_data["chapters"] = [copy.deepcopy(chapter) for _ in range(21)]
        with pytest.raises(MalformedBlueprintError):
            validate_blueprint(json.dumps(blueprint_data))

    def test_chapter_without_summary(self, blueprint_data):
        del blueprint_data["chapters"][2]["summary"]
        with pytest.raises(MalformedBlueprintError):
            validate_blueprint(json.dumps(blueprint_data))
