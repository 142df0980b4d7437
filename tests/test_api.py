"""
Tests for the Flask API routes.
"""

import pytest

from burstcull.app import create_app
from conftest import make_record

ZERO = "0" * 16


@pytest.fixture
def app(temp_store):
    temp_store.add_images([
        make_record("a1.jpg", ZERO, preview_ref=None, focus_score=0.2),
        make_record("a2.jpg", ZERO, preview_ref=None, focus_score=0.8),
        make_record("b.jpg", "1" * 16, preview_ref=None),
    ])
    app = create_app(temp_store)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def wait_for_job(app):
    thread = app.config['GROUPING_JOB'].thread
    if thread is not None:
        thread.join(timeout=30)


class TestPing:

    def test_ping(self, client):
        response = client.get('/api/ping')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'


class TestGrouping:
    """Test starting and inspecting grouping runs."""

    def test_initial_status(self, client):
        data = client.get('/api/status').get_json()
        assert data['state'] == 'idle'
        assert data['group_count'] == 0

    def test_group_run(self, app, client):
        response = client.post('/api/group', json={'threshold': 10, 'useSsim': False})
        assert response.status_code == 200
        assert response.get_json() == {'status': 'started'}
        wait_for_job(app)

        status = client.get('/api/status').get_json()
        assert status['state'] == 'completed'
        assert status['group_count'] == 1
        assert status['total'] == 3
        assert status['error'] is None

        groups = client.get('/api/groups').get_json()
        assert groups['count'] == 1
        group = groups['groups'][0]
        assert [img['file_name'] for img in group['images']] == ['a1.jpg', 'a2.jpg']
        assert group['images'][1]['id'] == group['auto_pick_id']

    def test_group_detail(self, app, client):
        client.post('/api/group', json={'useSsim': False})
        wait_for_job(app)
        group_id = client.get('/api/groups').get_json()['groups'][0]['id']

        response = client.get(f'/api/groups/{group_id}')
        assert response.status_code == 200
        assert response.get_json()['size'] == 2

    def test_group_detail_missing(self, client):
        assert client.get('/api/groups/nope').status_code == 404

    def test_invalid_threshold(self, client):
        response = client.post('/api/group', json={'threshold': 40})
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_invalid_ssim_threshold(self, client):
        response = client.post('/api/group', json={'ssimThreshold': 2})
        assert response.status_code == 400

    def test_invalid_use_ssim(self, client):
        response = client.post('/api/group', json={'useSsim': 'yes'})
        assert response.status_code == 400

    def test_conflict_while_running(self, app, client):
        job = app.config['GROUPING_JOB']
        from burstcull.grouping import AutoGrouper
        assert job.begin(AutoGrouper(app.config['PHOTO_STORE']))

        response = client.post('/api/group', json={})
        assert response.status_code == 409
        assert client.post('/api/disband').status_code == 409

    def test_abort_without_run(self, client):
        assert client.post('/api/abort').get_json()['status'] == 'no_run_in_progress'

    def test_null_options_use_defaults(self, app, client):
        response = client.post('/api/group', json={
            'threshold': None, 'ssimThreshold': None, 'maxGroupSize': None, 'useSsim': False,
        })
        assert response.status_code == 200
        wait_for_job(app)
        assert client.get('/api/status').get_json()['state'] == 'completed'

    def test_non_object_body(self, client):
        response = client.post('/api/group', json=[1, 2])
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_abort_before_worker_starts(self, app):
        """The job token is shared with the grouper, so an early abort is honoured."""
        from burstcull.grouping import AutoGrouper, GroupingState
        from burstcull.models import GroupingOptions

        job = app.config['GROUPING_JOB']
        grouper = AutoGrouper(app.config['PHOTO_STORE'])
        assert job.begin(grouper)
        assert job.request_abort()

        groups = grouper.regroup_all(GroupingOptions(use_ssim_refinement=False), token=job.token)
        job.finish(len(groups))

        assert groups == []
        assert job.to_dict()['state'] == 'aborted'
        assert grouper.state == GroupingState.ABORTED

    def test_regroup_and_disband(self, app, client):
        client.post('/api/group', json={'useSsim': False})
        wait_for_job(app)
        first = client.get('/api/groups').get_json()['groups'][0]['member_ids']

        client.post('/api/regroup', json={'useSsim': False})
        wait_for_job(app)
        assert client.get('/api/groups').get_json()['groups'][0]['member_ids'] == first

        response = client.post('/api/disband')
        assert response.get_json() == {'status': 'disbanded', 'count': 1}
        assert client.get('/api/groups').get_json()['count'] == 0

    def test_stats(self, app, client):
        client.post('/api/group', json={'useSsim': False})
        wait_for_job(app)
        stats = client.get('/api/stats').get_json()
        assert stats['total_images'] == 3
        assert stats['groups'] == 1
