import logging

import pytest

from envshelter.config import settings_from_dict
from envshelter.engine.controller import ShelterController
from envshelter.engine.features import Feature, ToggleOutcome
from envshelter.engine.interception import PreviewInterceptor
from envshelter.engine.planner import StyleTag
from envshelter.engine.ports import InMemoryDocuments, InMemoryOverlaySink
from envshelter.engine.reveal import EventKind, InteractionEvent

ENV_TEXT = "# comment\nDB_HOST=localhost\nAPI_KEY=\"secret123\"\nX=ab\nDB_PASS=hunter22\n"


@pytest.fixture
def messages():
    return []


@pytest.fixture
def controller(messages):
    settings = settings_from_dict({
        "shelter": {
            "configuration": {"partial_mode": False, "mask_char": "*"},
            "modules": {"files": True, "peek": True, "telescope_previewer": True},
        },
    })
    docs = InMemoryDocuments({".env": ENV_TEXT, "app.py": "SECRET=1\n"})
    c = ShelterController(settings, docs, InMemoryOverlaySink(), notifier=lambda m, lvl: messages.append((m, lvl)))
    c.handle_event(InteractionEvent(EventKind.DOCUMENT_ENTERED, ".env", 1))
    return c


def overlay(c, document=".env"):
    return {ins.line: ins for ins in c.sink.get(document)}


def test_entering_env_document_draws_overlay(controller):
    assert set(overlay(controller)) == {2, 3, 4, 5}
    assert overlay(controller)[2].text == "*********"


def test_non_env_document_is_left_alone(controller):
    assert controller.redraw("app.py") is False
    assert controller.sink.get("app.py") == []


def test_text_change_replans_from_scratch(controller):
    controller.documents.set_text(".env", "NEW=value\n")
    controller.handle_event(InteractionEvent(EventKind.TEXT_CHANGED, ".env", 1))
    assert list(overlay(controller)) == [1]
    assert overlay(controller)[1].text == "*****"


def test_reveal_then_cursor_move(controller):
    assert controller.reveal_current_line(".env", 3)
    assert overlay(controller)[3].text == '"secret123"'
    assert overlay(controller)[3].style_tag is StyleTag.REVEALED

    ended = controller.handle_event(InteractionEvent(EventKind.CURSOR_MOVED, ".env", 5))
    assert ended
    assert overlay(controller)[3].text == '"*********"'
    assert overlay(controller)[3].style_tag is StyleTag.MASKED


def test_leaving_document_ends_reveal(controller):
    controller.reveal_current_line(".env", 2)
    assert controller.handle_event(InteractionEvent(EventKind.DOCUMENT_LEFT, ".env"))
    assert not controller.reveal.active
    assert overlay(controller)[2].style_tag is StyleTag.MASKED


def test_reveal_requires_file_rendering(controller, messages):
    controller.set_state("disable", "files")
    messages.clear()
    assert controller.reveal_current_line(".env", 2) is False
    assert messages == [("Shelter mode for files is not enabled", logging.WARNING)]


def test_disabling_files_clears_overlay_and_reveal(controller, messages):
    controller.reveal_current_line(".env", 2)
    assert controller.set_state("disable", "files")
    assert controller.sink.get(".env") == []
    assert not controller.reveal.active
    assert messages[-1] == ("Shelter mode for FILES is now disabled", logging.INFO)


def test_set_state_unknown_feature_is_reported(controller, messages):
    assert controller.set_state("enable", "nope") is False
    message, level = messages[-1]
    assert level == logging.ERROR
    assert "nope" in message


def test_set_state_unknown_verb_is_reported(controller, messages):
    assert controller.set_state("flip") is False
    assert messages[-1][1] == logging.ERROR


def test_set_state_all(controller, messages):
    controller.set_state("disable")
    assert controller.features.enabled_features() == []
    assert messages[-1] == ("All shelter modes are now disabled", logging.INFO)
    controller.set_state("enable")
    assert set(controller.features.enabled_features()) == set(Feature)


def test_toggle_all_round_trip(controller):
    initial = controller.features.snapshot()
    assert controller.toggle_all() is ToggleOutcome.DISABLED
    assert controller.sink.get(".env") == []
    assert controller.toggle_all() is ToggleOutcome.RESTORED
    assert controller.features.snapshot() == initial
    assert set(overlay(controller)) == {2, 3, 4, 5}


def test_mask_value_per_feature(controller):
    assert controller.mask_value('"hunter2"', Feature.HOVER) == '"*******"'
    assert controller.mask_value("hunter2", Feature.COMPLETION) == "hunter2"
    assert controller.mask_value("hunter2", "unknown") == "hunter2"


def test_reconfigure_swaps_policy(controller):
    controller.reconfigure(settings_from_dict({
        "shelter": {"configuration": {"partial_mode": True, "mask_char": "#"}},
    }))
    assert controller.policy.mask_char == "#"
    assert overlay(controller)[2].text == "loc###ost"
    # 8 chars is too short for 3 + 3 + 3
    assert overlay(controller)[5].text == "########"


def test_reconfigure_keeps_feature_snapshot(controller):
    initial = controller.features.initial
    controller.reconfigure(settings_from_dict({"shelter": {"modules": {"files": False}}}))
    assert controller.features.initial == initial


def test_malformed_partial_mode_falls_back_to_full_mask(controller):
    controller.reconfigure(settings_from_dict({
        "shelter": {"configuration": {"partial_mode": {"min_mask": 0}}},
    }))
    assert controller.policy.partial is None
    assert overlay(controller)[5].text == "********"


def test_superseded_pass_is_discarded(controller):
    first = controller.begin_redraw(".env")
    controller.documents.set_text(".env", "ONLY=x\n")
    second = controller.begin_redraw(".env")
    assert controller.finish_redraw(first) is False
    assert controller.finish_redraw(second) is True
    assert list(overlay(controller)) == [1]


def test_preview_interceptor(controller):
    hook = PreviewInterceptor(controller, Feature.TELESCOPE_PREVIEWER)
    decision = hook("/tmp/.env.local", "A=secret\n")
    assert decision.applicable
    assert decision.instructions[0].text == "******"
    assert not hook("/tmp/readme.md", "A=secret\n").applicable


def test_preview_unknown_feature(controller):
    assert not controller.preview(".env", "A=1", "nope").applicable


def test_teardown_clears_everything(controller):
    controller.reveal_current_line(".env", 2)
    controller.teardown()
    assert controller.sink.get(".env") == []
    assert not controller.reveal.active
