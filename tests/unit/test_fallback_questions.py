import pytest

from interview_session.fallback_questions import GENERIC_CONTINUATION, describe_role, fallback_question


@pytest.mark.parametrize("interview_type", ["technical", "behavioral", "mixed"])
def test_known_types_render_level_and_job_type(interview_type):
    question = fallback_question(interview_type, "Junior", "Frontend Developer")
    assert "Junior Frontend Developer" in question
    assert question.endswith("?")


def test_types_have_distinct_templates():
    questions = {fallback_question(kind, "Senior", "SRE") for kind in ("technical", "behavioral", "mixed", "other")}
    assert len(questions) == 4


def test_unrecognized_type_uses_generic_default():
    assert fallback_question("pairing", "Lead", "Architect") == fallback_question(None, "Lead", "Architect")


def test_type_lookup_is_case_insensitive():
    assert fallback_question("Technical", "Senior", "SRE") == fallback_question("technical", "Senior", "SRE")


def test_missing_profile_fields_still_render():
    question = fallback_question("technical")
    assert "mid-level professional" in question


def test_describe_role():
    assert describe_role("technical", "Senior", "Backend Engineer") == (
        "Senior Backend Engineer position requiring technical expertise"
    )


def test_generic_continuation_is_a_question():
    assert GENERIC_CONTINUATION.strip().endswith("?")
