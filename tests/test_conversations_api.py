"""
Tests for the quote conversation API routes
"""
import pytest

from conftest import login


def email_payload(seeded, **overrides):
    payload = {
        'to': 'client@x.com',
        'subject': 'Your quote',
        'body': 'Please see the attached quote.',
        'provider_message_id': 'provider-msg-1',
        'provider_thread_id': 'provider-thread-1',
        'sent_at': '2025-03-05T10:00:00',
    }
    payload.update(overrides)
    return payload


@pytest.mark.integration
class TestAuthentication:
    """Tests for session enforcement"""

    def test_requires_login(self, client, seeded):
        """Test that anonymous requests get 401"""
        response = client.get(f"/api/quotes/{seeded['root']}/family")
        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'error': 'Authentication required'}

    def test_stranger_is_forbidden(self, client, seeded):
        """Test that another user's quote returns 403"""
        login(client, seeded['stranger'])
        response = client.get(f"/api/quotes/{seeded['root']}/conversation")
        assert response.status_code == 403
        assert response.get_json()['error_code'] == 'unauthorized'

    def test_missing_quote_is_404(self, owner_client):
        """Test that an unknown quote id returns 404"""
        response = owner_client.get('/api/quotes/does-not-exist/family')
        assert response.status_code == 404
        assert response.get_json()['error_code'] == 'not_found'


@pytest.mark.integration
class TestFamilyRoutes:
    """Tests for family and revision routes"""

    def test_family(self, owner_client, seeded):
        """Test that a revision reports the shared root"""
        response = owner_client.get(f"/api/quotes/{seeded['revision']}/family")
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['root_quote_id'] == seeded['root']
        assert set(data['quote_ids']) == {seeded['root'], seeded['revision']}
        assert data['revision_count'] == 1

    def test_revision_limit_uses_stored_tier(self, owner_client, seeded):
        """Test that the free owner with one revision may create another"""
        response = owner_client.get(f"/api/quotes/{seeded['root']}/revision-limit")
        data = response.get_json()['data']

        assert data['can_create'] is True
        assert data['current_revisions'] == 1
        assert data['upgrade_message']

    def test_create_revision_then_hit_limit(self, owner_client, seeded):
        """Test that the second free revision succeeds and the third is refused"""
        url = f"/api/quotes/{seeded['revision']}/revisions"

        created = owner_client.post(url, json={'revision_notes': 'Reduced hours'})
        assert created.status_code == 201
        quote = created.get_json()['data']
        assert quote['parent_quote_id'] == seeded['root']
        assert quote['version_number'] == '3'
        assert quote['status'] == 'revised'

        refused = owner_client.post(url, json={'revision_notes': 'Again'})
        assert refused.status_code == 403
        assert refused.get_json()['error_code'] == 'limit_exceeded'

    def test_create_revision_requires_notes(self, owner_client, seeded):
        """Test that revision_notes is mandatory"""
        response = owner_client.post(f"/api/quotes/{seeded['root']}/revisions", json={})
        assert response.status_code == 400
        assert 'revision_notes' in response.get_json()['error']

    def test_create_revision_rejects_bad_line_items(self, owner_client, seeded):
        """Test that malformed line items are refused before touching the database"""
        response = owner_client.post(f"/api/quotes/{seeded['root']}/revisions", json={
            'revision_notes': 'Itemised',
            'line_items': [{'service_name': 'Design', 'quantity': -1}],
        })
        assert response.status_code == 400


@pytest.mark.integration
class TestEmailRoutes:
    """Tests for thread lookup, recording and history routes"""

    def test_thread_rejects_bad_email(self, owner_client, seeded):
        """Test that ?to must be a valid address"""
        response = owner_client.get(f"/api/quotes/{seeded['root']}/thread?to=not-an-email")
        assert response.status_code == 400

    def test_thread_empty(self, owner_client, seeded):
        """Test that an unsent family has no thread"""
        response = owner_client.get(f"/api/quotes/{seeded['root']}/thread?to=client@x.com")
        assert response.get_json()['data'] == {
            'thread_id': None, 'last_sent_at': None, 'message_count': 0
        }

    def test_record_and_continue_thread(self, owner_client, seeded):
        """Test that an email recorded on the root is found from the revision"""
        recorded = owner_client.post(f"/api/quotes/{seeded['root']}/emails", json=email_payload(seeded))
        assert recorded.status_code == 201
        assert recorded.get_json()['data']['email_type'] == 'quote_sent'

        response = owner_client.get(f"/api/quotes/{seeded['revision']}/thread?to=client@x.com")
        assert response.get_json()['data'] == {
            'thread_id': 'provider-thread-1',
            'last_sent_at': '2025-03-05T10:00:00',
            'message_count': 1,
        }

    def test_record_revision_with_context(self, owner_client, seeded):
        """Test that a revision send is annotated with the supplied context"""
        payload = email_payload(seeded, root_quote_id=seeded['root'], revision_context={
            'version_number': '2', 'revision_notes': 'New pricing', 'is_revision': True
        })
        response = owner_client.post(f"/api/quotes/{seeded['revision']}/emails", json=payload)
        data = response.get_json()['data']

        assert response.status_code == 201
        assert data['email_type'] == 'quote_revision_sent'
        assert data['body'].endswith(f"Notes: New pricing\nOriginal Quote ID: {seeded['root']}")

    def test_record_rejects_wrong_root(self, owner_client, seeded):
        """Test that a mismatched root_quote_id returns 409"""
        payload = email_payload(seeded, root_quote_id=seeded['revision'])
        response = owner_client.post(f"/api/quotes/{seeded['revision']}/emails", json=payload)
        assert response.status_code == 409
        assert response.get_json()['error_code'] == 'corrupt_family'

    def test_record_requires_fields(self, owner_client, seeded):
        """Test that missing fields are reported"""
        response = owner_client.post(f"/api/quotes/{seeded['root']}/emails", json={'to': 'client@x.com'})
        assert response.status_code == 400
        assert 'provider_message_id' in response.get_json()['error']

    def test_record_rejects_bad_cc(self, owner_client, seeded):
        response = owner_client.post(f"/api/quotes/{seeded['root']}/emails",
                                     json=email_payload(seeded, cc='boss@x.com, nope'))
        assert response.status_code == 400

    def test_record_rejects_bad_timestamp(self, owner_client, seeded):
        response = owner_client.post(f"/api/quotes/{seeded['root']}/emails",
                                     json=email_payload(seeded, sent_at='yesterday-ish'))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid sent_at timestamp'

    def test_conversation_and_timeline(self, owner_client, seeded):
        """Test the family history and timeline after two sends"""
        owner_client.post(f"/api/quotes/{seeded['root']}/emails", json=email_payload(seeded))
        owner_client.post(f"/api/quotes/{seeded['revision']}/emails", json=email_payload(
            seeded, provider_message_id='provider-msg-2', sent_at='2025-03-08T10:00:00'
        ))

        history = owner_client.get(f"/api/quotes/{seeded['root']}/conversation").get_json()['data']
        assert [m['quote_id'] for m in history] == [seeded['root'], seeded['revision']]
        assert [m['is_revision'] for m in history] == [False, True]

        timeline = owner_client.get(f"/api/quotes/{seeded['root']}/revision-timeline").get_json()['data']
        assert [entry['version_number'] for entry in timeline] == ['1', '2']

    def test_conversation_empty(self, owner_client, seeded):
        """Test that an owned family without emails returns an empty list"""
        response = owner_client.get(f"/api/quotes/{seeded['root']}/conversation")
        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'data': []}

    def test_record_ignores_company_in_body(self, owner_client, seeded):
        """Test that the stored message takes the quote's company"""
        payload = email_payload(seeded, company_id='someone-elses-company')
        response = owner_client.post(f"/api/quotes/{seeded['root']}/emails", json=payload)
        assert response.status_code == 201
        assert response.get_json()['data']['company_id'] == seeded['company']

    def test_record_normalizes_offset_timestamp(self, owner_client, seeded):
        payload = email_payload(seeded, sent_at='2025-03-05T15:00:00+05:00')
        response = owner_client.post(f"/api/quotes/{seeded['root']}/emails", json=payload)
        assert response.get_json()['data']['sent_at'] == '2025-03-05T10:00:00'

    @pytest.mark.parametrize('overrides', [
        {'body': ['not', 'text']},
        {'subject': 42},
        {'sent_at': 1741168800},
        {'revision_context': 'v2'},
        {'revision_context': {'revision_notes': 7}},
        {'revision_context': {'is_revision': 'yes'}},
    ])
    def test_record_rejects_wrong_types(self, owner_client, seeded, overrides):
        """Test that malformed payloads are a 400, not a server error"""
        payload = email_payload(seeded, **overrides)
        response = owner_client.post(f"/api/quotes/{seeded['revision']}/emails", json=payload)
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'invalid_request'


@pytest.mark.integration
class TestListingRoutes:
    """Tests for version history and grouped listing"""

    def test_versions(self, owner_client, seeded):
        response = owner_client.get(f"/api/quotes/{seeded['revision']}/versions")
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['root_quote_id'] == seeded['root']
        assert [v['version_number'] for v in data['versions']] == ['1', '2']
        assert all('line_items' in v for v in data['versions'])

    def test_versions_stranger(self, client, seeded):
        login(client, seeded['stranger'])
        response = client.get(f"/api/quotes/{seeded['root']}/versions")
        assert response.status_code == 403

    def test_families(self, owner_client, seeded):
        response = owner_client.get('/api/quotes/families')
        families = response.get_json()['data']

        assert response.status_code == 200
        assert len(families) == 1
        assert families[0]['root_quote_id'] == seeded['root']
        assert families[0]['revision_count'] == 1

    def test_families_for_stranger_are_empty(self, client, seeded):
        login(client, seeded['stranger'])
        assert client.get('/api/quotes/families').get_json()['data'] == []

    def test_families_requires_login(self, client, seeded):
        assert client.get('/api/quotes/families').status_code == 401


