from arena.services import fingerprint_service


def test_fingerprint_is_deterministic_fixed_length_hex():
    a = fingerprint_service.fingerprint("203.0.113.7", "Mozilla/5.0")
    b = fingerprint_service.fingerprint("203.0.113.7", "Mozilla/5.0")
    assert a == b
    assert len(a) == 64
    int(a, 16)


def test_fingerprint_does_not_leak_inputs():
    digest = fingerprint_service.fingerprint("203.0.113.7", "Mozilla/5.0")
    assert "203.0.113.7" not in digest
    assert "Mozilla" not in digest


def test_distinct_visitors_get_distinct_fingerprints():
    base = fingerprint_service.fingerprint("203.0.113.7", "Mozilla/5.0")
    assert fingerprint_service.fingerprint("203.0.113.8", "Mozilla/5.0") != base
    assert fingerprint_service.fingerprint("203.0.113.7", "curl/8.0") != base


def test_missing_user_agent_is_empty_string():
    assert fingerprint_service.fingerprint("203.0.113.7", None) == \
        fingerprint_service.fingerprint("203.0.113.7", "")


def test_salt_changes_digest(monkeypatch):
    from arena.config import settings

    before = fingerprint_service.fingerprint("203.0.113.7", "ua")
    monkeypatch.setattr(settings, "fingerprint_salt", "another-salt")
    assert fingerprint_service.fingerprint("203.0.113.7", "ua") != before


def test_voter_key_prefers_authenticated_identity():
    assert fingerprint_service.voter_key("42", "203.0.113.7", "ua") == "user:42"

    anon = fingerprint_service.voter_key(None, "203.0.113.7", "ua")
    assert anon == "anon:" + fingerprint_service.fingerprint("203.0.113.7", "ua")


def test_hash_ip_differs_from_fingerprint():
    assert fingerprint_service.hash_ip("203.0.113.7") != \
        fingerprint_service.fingerprint("203.0.113.7", "")
