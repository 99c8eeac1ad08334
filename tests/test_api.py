import pytest

from webforms.api import deps
from webforms.db.models import NewsletterSubscriber
from webforms.main import app

SECURITY_HEADERS = {
    "x-content-type-options": "nosniff",
    "x-frame-options": "DENY",
    "x-xss-protection": "1; mode=block",
}


def assert_hardened(response):
    assert response.headers["content-type"].startswith("application/json")
    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


def use_settings(make_settings, **overrides):
    app.dependency_overrides[deps.get_settings] = lambda: make_settings(**overrides)


# -------------------------------------------------------------------
# Method gate
# -------------------------------------------------------------------
@pytest.mark.parametrize("path", ["/contact", "/newsletter"])
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH"])
def test_non_post_is_rejected_before_pipeline(client, transport, path, method):
    response = client.request(method, path)

    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Direct access not permitted"}
    assert_hardened(response)
    assert transport.sent == []


def test_form_routes_share_one_method_list():
    routes = {route.path: route.methods for route in app.routes if route.path in ("/contact", "/newsletter")}

    assert routes == {
        "/contact": set(deps.FORM_METHODS),
        "/newsletter": set(deps.FORM_METHODS),
    }


def test_health_has_security_headers(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert_hardened(response)


# -------------------------------------------------------------------
# Contact
# -------------------------------------------------------------------
def test_valid_contact_is_sent_once(client, transport, contact_form):
    response = client.post("/contact", data=contact_form)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Thank you for contacting us! We will get back to you within 24 hours.",
    }
    assert_hardened(response)

    assert len(transport.sent) == 1
    message = transport.sent[0]
    assert message.to == "contact@nexgensolutions.com"
    assert "ada@example.com" in message.reply_to
    for value in ("Ada Lovelace", "ada@example.com", "Project enquiry", contact_form["message"]):
        assert value in message.html_body
        assert value in message.text_body


def test_contact_missing_field(client, transport, contact_form):
    contact_form["subject"] = ""
    response = client.post("/contact", data=contact_form)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Please fill in all required fields. Missing: subject",
    }
    assert_hardened(response)
    assert transport.sent == []


def test_contact_honeypot(client, transport, contact_form):
    contact_form["website"] = "https://bots.example"
    response = client.post("/contact", data=contact_form)

    assert response.status_code == 400
    assert response.json()["message"] == "Spam detected."
    assert transport.sent == []


def test_contact_keyword_mid_word(client, contact_form):
    contact_form["message"] = "Our newsletter mentions superViAgRalike deals every week"
    response = client.post("/contact", data=contact_form)

    assert response.status_code == 400
    assert response.json()["message"] == "Your message contains prohibited content."


def test_contact_cooldown(client, transport, clock, contact_form):
    assert client.post("/contact", data=contact_form).status_code == 200

    clock.advance(15)
    response = client.post("/contact", data=contact_form)
    assert response.status_code == 400
    assert response.json()["message"] == "Please wait 45 seconds before submitting again."

    clock.advance(45)
    assert client.post("/contact", data=contact_form).status_code == 200
    assert len(transport.sent) == 2


def test_rejected_submission_does_not_start_cooldown(client, contact_form):
    bad = dict(contact_form, name="A")
    assert client.post("/contact", data=bad).status_code == 400
    assert client.post("/contact", data=contact_form).status_code == 200


def test_dispatch_failure(client, transport, contact_form):
    transport.fail_for.add("contact@nexgensolutions.com")
    response = client.post("/contact", data=contact_form)

    assert response.status_code == 400
    assert response.json()["message"] == "Failed to send email. Please try again later or contact us directly."

    # a failed send does not count against the cooldown
    transport.fail_for.clear()
    assert client.post("/contact", data=contact_form).status_code == 200


def test_cooldown_is_per_session(client, contact_form):
    # the limiter state travels in the session cookie; dropping it resets the limit
    assert client.post("/contact", data=contact_form).status_code == 200
    assert client.post("/contact", data=contact_form).status_code == 400

    client.cookies.clear()
    assert client.post("/contact", data=contact_form).status_code == 200


def test_contact_submission_log(client, make_settings, tmp_path, contact_form):
    use_settings(make_settings, SUBMISSION_LOG_DIR=str(tmp_path))
    assert client.post("/contact", data=contact_form).status_code == 200

    lines = (tmp_path / "contact_submissions_2026-02.log").read_text().splitlines()
    assert lines == [
        "[2026-02-14 15:04:05] Name: Ada Lovelace | Email: ada@example.com | Subject: Project enquiry | IP: testclient"
    ]


# -------------------------------------------------------------------
# Newsletter
# -------------------------------------------------------------------
def test_newsletter_sends_confirmation_and_admin_notice(client, transport):
    response = client.post("/newsletter", data={"email": "reader@example.com", "website": ""})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Thank you for subscribing! You will receive our latest updates and insights.",
    }
    assert_hardened(response)
    assert [m.to for m in transport.sent] == ["reader@example.com", "newsletter@nexgensolutions.com"]


def test_newsletter_double_optin(client, transport, make_settings):
    use_settings(make_settings, NEWSLETTER_DOUBLE_OPTIN=True, NEWSLETTER_ADMIN_NOTIFICATION=False)
    response = client.post("/newsletter", data={"email": "reader@example.com"})

    assert response.json()["message"] == (
        "Thank you for subscribing! Please check your email to confirm your subscription."
    )
    assert len(transport.sent) == 1
    assert "/confirm-subscription?token=" in transport.sent[0].text_body


def test_newsletter_admin_failure_is_not_surfaced(client, transport):
    transport.fail_for.add("newsletter@nexgensolutions.com")
    response = client.post("/newsletter", data={"email": "reader@example.com"})

    assert response.status_code == 200
    assert [m.to for m in transport.sent] == ["reader@example.com"]


def test_newsletter_confirmation_failure_is_surfaced(client, transport):
    transport.fail_for.add("reader@example.com")
    response = client.post("/newsletter", data={"email": "reader@example.com"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_newsletter_disposable_domain(client):
    response = client.post("/newsletter", data={"email": "reader@10minutemail.com"})
    assert response.status_code == 400
    assert response.json()["message"] == "Disposable email addresses are not allowed."

    assert client.post("/newsletter", data={"email": "reader@example.net"}).status_code == 200


def test_newsletter_cooldown(client, clock):
    assert client.post("/newsletter", data={"email": "one@example.com"}).status_code == 200

    clock.advance(10)
    response = client.post("/newsletter", data={"email": "two@example.com"})
    assert response.json()["message"] == "Please wait 20 seconds before subscribing again."

    clock.advance(20)
    assert client.post("/newsletter", data={"email": "two@example.com"}).status_code == 200


def test_newsletter_duplicate_with_database(client, clock, make_settings, subscriber_store, db_session):
    use_settings(make_settings, NEWSLETTER_USE_DATABASE=True)
    app.dependency_overrides[deps.get_subscriber_store] = lambda: subscriber_store

    assert client.post("/newsletter", data={"email": "reader@example.com"}).status_code == 200
    assert db_session.query(NewsletterSubscriber).one().status == "pending"

    clock.advance(30)
    response = client.post("/newsletter", data={"email": "reader@example.com"})
    assert response.status_code == 400
    assert response.json()["message"] == "This email is already subscribed to our newsletter."

    db_session.query(NewsletterSubscriber).update({"status": "unsubscribed"})
    db_session.commit()

    clock.advance(30)
    assert client.post("/newsletter", data={"email": "reader@example.com"}).status_code == 200


def test_newsletter_without_database_never_reports_duplicates(client, clock):
    assert client.post("/newsletter", data={"email": "reader@example.com"}).status_code == 200
    clock.advance(30)
    assert client.post("/newsletter", data={"email": "reader@example.com"}).status_code == 200


def test_failed_confirmation_leaves_address_free_to_retry(client, transport, make_settings, subscriber_store, db_session):
    use_settings(make_settings, NEWSLETTER_USE_DATABASE=True)
    app.dependency_overrides[deps.get_subscriber_store] = lambda: subscriber_store

    transport.fail_for.add("reader@example.com")
    response = client.post("/newsletter", data={"email": "reader@example.com"})
    assert response.status_code == 400
    assert response.json()["message"].startswith("Failed to send email")
    assert db_session.query(NewsletterSubscriber).count() == 0

    transport.fail_for.clear()
    response = client.post("/newsletter", data={"email": "reader@example.com"})
    assert response.status_code == 200
    assert db_session.query(NewsletterSubscriber).one().status == "pending"
