"""Tests for the screenplay data model."""

import pytest
from pydantic import ValidationError

from core.models import (
    DEFAULT_AUTHOR,
    DEFAULT_TITLE,
    Element,
    ElementKind,
    Scene,
    Screenplay,
    ScreenplayReply,
    TitlePageInfo,
)


class TestElementKind:
    """Tests for core.models.ElementKind.from_raw."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("action", ElementKind.ACTION),
            ("Character", ElementKind.CHARACTER),
            ("DIALOGUE", ElementKind.DIALOGUE),
            ("  parenthetical ", ElementKind.PARENTHETICAL),
            ("transition", ElementKind.TRANSITION),
        ],
    )
    def test_known_kinds_case_insensitive(self, raw, expected):
        assert ElementKind.from_raw(raw) == expected

    @pytest.mark.parametrize("raw", ["footnote", "", "scene heading", None, 3, ["dialogue"]])
    def test_unknown_falls_back_to_action(self, raw):
        assert ElementKind.from_raw(raw) == ElementKind.ACTION

    def test_member_passthrough(self):
        assert ElementKind.from_raw(ElementKind.TRANSITION) is ElementKind.TRANSITION


class TestElement:
    """Tests for core.models.Element."""

    def test_kind_resolved_on_construction(self):
        assert Element(kind="dialogue", content="Hi.").kind == ElementKind.DIALOGUE

    def test_unknown_kind_is_action(self):
        assert Element(kind="footnote", content="x").kind == ElementKind.ACTION

    def test_defaults(self):
        el = Element()
        assert el.kind == ElementKind.ACTION
        assert el.content == ""

    def test_frozen(self):
        el = Element(kind="action", content="A man enters.")
        with pytest.raises(ValidationError):
            el.content = "changed"


class TestScreenplay:
    """Tests for core.models.Screenplay and Scene."""

    def test_empty_screenplay(self):
        sp = Screenplay()
        assert sp.scenes == ()
        assert sp.element_count == 0

    def test_element_count(self):
        sp = Screenplay(
            scenes=[
                Scene(heading="INT. A - DAY", elements=[Element(), Element()]),
                Scene(heading="EXT. B - NIGHT"),
                Scene(heading="INT. C - DAY", elements=[Element()]),
            ]
        )
        assert sp.element_count == 3
        assert isinstance(sp.scenes, tuple)
        assert isinstance(sp.scenes[0].elements, tuple)

    def test_scene_requires_heading(self):
        with pytest.raises(ValidationError):
            Scene()


class TestTitlePageInfo:
    """Tests for core.models.TitlePageInfo defaults."""

    def test_defaults_when_absent(self):
        tp = TitlePageInfo()
        assert tp.title == DEFAULT_TITLE
        assert tp.author == DEFAULT_AUTHOR

    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_defaults_when_blank(self, blank):
        tp = TitlePageInfo(title=blank, author=blank)
        assert tp.title == DEFAULT_TITLE
        assert tp.author == DEFAULT_AUTHOR

    def test_values_stripped(self):
        tp = TitlePageInfo(title="  Bar Scene ", author="J. Doe\n")
        assert tp.title == "Bar Scene"
        assert tp.author == "J. Doe"


class TestScreenplayReply:
    """Tests for mapping the LLM reply shape onto the data model."""

    def test_field_for_field_mapping(self):
        reply = ScreenplayReply.model_validate(
            {
                "scenes": [
                    {
                        "heading": "INT. BAR - NIGHT",
                        "elements": [
                            {"type": "action", "content": "A man enters."},
                            {"type": "footnote", "content": "aside"},
                            {"type": "dialogue", "content": None},
                        ],
                        "mood": "ignored",
                    }
                ]
            }
        )
        sp = reply.to_screenplay()

        assert len(sp.scenes) == 1
        scene = sp.scenes[0]
        assert scene.heading == "INT. BAR - NIGHT"
        assert [e.kind for e in scene.elements] == [
            ElementKind.ACTION,
            ElementKind.ACTION,
            ElementKind.DIALOGUE,
        ]
        assert [e.content for e in scene.elements] == ["A man enters.", "aside", ""]

    def test_missing_elements_is_empty(self):
        sp = ScreenplayReply.model_validate({"scenes": [{"heading": "EXT. ROAD - DAY"}]}).to_screenplay()
        assert sp.scenes[0].elements == ()

    def test_missing_scenes_rejected(self):
        with pytest.raises(ValidationError):
            ScreenplayReply.model_validate({"acts": []})
