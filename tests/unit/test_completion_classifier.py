from session_controller import PhraseClassifier


def test_completion_phrases_match_case_insensitively():
    classifier = PhraseClassifier()
    assert classifier.is_session_end("Thank you, Asha. The Interview Is Complete.")
    assert classifier.is_session_end("That brings us to the end of our interview.")
    assert classifier.is_session_end("The viva has concluded, well done.")
    assert not classifier.is_session_end("Let's move on to the next question.")


def test_paraphrased_completion_is_not_detected():
    assert not PhraseClassifier().is_session_end("We're all done for today, thanks!")


def test_question_heuristic_skips_clarifying_followups():
    classifier = PhraseClassifier()
    assert classifier.counts_as_question("How would you design a rate limiter?")
    assert not classifier.counts_as_question("Could you expand on that?")
    assert not classifier.counts_as_question("Great answer.")


def test_yaml_lists_override_defaults(tmp_path):
    path = tmp_path / "classifier.yaml"
    path.write_text("completion_phrases:\n  - that wraps up\nclarifying_openers:\n  - can you\n", encoding="utf-8")
    classifier = PhraseClassifier.from_yaml(path)
    assert classifier.is_session_end("Okay, that wraps up our session.")
    assert not classifier.is_session_end("The interview is complete.")
    assert not classifier.counts_as_question("Can you say more?")


def test_missing_yaml_falls_back_to_packaged_lists(tmp_path):
    classifier = PhraseClassifier.from_yaml(tmp_path / "absent.yaml")
    assert "end of our interview" in classifier.completion_phrases
    assert classifier.clarifying_openers == ("could you",)
