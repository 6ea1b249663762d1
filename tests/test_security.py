from backend.app.wizard.security import NONCE_LENGTH, NONCE_LIFE, create_nonce, verify_nonce

NOW = 1_700_000_000.0


def test_nonce_verifies_for_its_action():
    nonce = create_nonce("jetpack", "s3cret", now=NOW)

    assert len(nonce) == NONCE_LENGTH
    assert verify_nonce(nonce, "jetpack", "s3cret", now=NOW)


def test_nonce_is_bound_to_action_and_secret():
    nonce = create_nonce("jetpack", "s3cret", now=NOW)

    assert not verify_nonce(nonce, "akismet", "s3cret", now=NOW)
    assert not verify_nonce(nonce, "jetpack", "other", now=NOW)


def test_nonce_survives_one_tick_then_expires():
    nonce = create_nonce("jetpack", "s3cret", now=NOW)

    assert verify_nonce(nonce, "jetpack", "s3cret", now=NOW + NONCE_LIFE / 2)
    assert not verify_nonce(nonce, "jetpack", "s3cret", now=NOW + NONCE_LIFE + 1)


def test_empty_nonce_never_verifies():
    assert not verify_nonce("", "jetpack", "s3cret", now=NOW)
    assert not verify_nonce(None, "jetpack", "s3cret", now=NOW)


def test_non_ascii_nonce_is_rejected_not_raised():
    assert not verify_nonce("ééé", "jetpack", "s3cret", now=NOW)
