"""
Flask routes for burstcull.

Contains the JSON API for starting, aborting and inspecting grouping
runs and for reading the resulting groups and library statistics.
"""

from __future__ import annotations

import threading
import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from ..grouping import AutoGrouper
from ..models import GroupingOptions
from ..state import GroupingJobState
from ..user_config import get_user_config
from ..utils import validators

# Create blueprint for routes
api = Blueprint('api', __name__)

# Module logger
_logger = logging.getLogger(__name__)


def _store():
    return current_app.config['PHOTO_STORE']


def _job() -> GroupingJobState:
    return current_app.config['GROUPING_JOB']


def _options_from_request(data: dict) -> tuple[GroupingOptions | None, str]:
    """Build GroupingOptions from a JSON body, defaulting to the user config."""
    config = get_user_config()

    def value(key, default):
        # null means "not given"
        given = data.get(key)
        return default if given is None else given

    threshold = value('threshold', config.similarity_threshold)
    ssim_threshold = value('ssimThreshold', config.ssim_threshold)
    max_group_size = value('maxGroupSize', config.max_group_size)
    use_ssim = value('useSsim', config.use_ssim_refinement)

    is_valid, error = validators.validate_grouping_params(
        threshold=threshold,
        ssim_threshold=ssim_threshold,
        max_group_size=max_group_size,
    )
    if not is_valid:
        return None, error
    if not isinstance(use_ssim, bool):
        return None, "useSsim must be a boolean"

    return GroupingOptions(
        similarity_threshold=int(threshold),
        ssim_threshold=float(ssim_threshold),
        use_ssim_refinement=use_ssim,
        max_group_size=int(max_group_size or 0),
    ), ""


def _run_job(job: GroupingJobState, grouper: AutoGrouper, options: GroupingOptions, regroup: bool):
    """Worker thread body: run the grouper and record the outcome."""
    try:
        if regroup:
            groups = grouper.regroup_all(options, token=job.token)
        else:
            groups = grouper.group_similar_images(options, token=job.token)
        job.finish(len(groups))
    except Exception as e:
        _logger.error(f"Background grouping failed: {e}")
        job.finish(0, error=str(e))


def _start_job(regroup: bool):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    options, error = _options_from_request(data)
    if options is None:
        return jsonify({'error': error}), 400

    job = _job()
    grouper = AutoGrouper(_store())
    if not job.begin(grouper):
        return jsonify({'error': 'A grouping run is already in progress'}), 409

    options.on_progress = job.update_progress
    thread = threading.Thread(
        target=_run_job,
        args=(job, grouper, options, regroup),
        name='burstcull-grouping',
    )
    thread.daemon = True
    job.thread = thread
    thread.start()

    return jsonify({'status': 'started'})


# =============================================================================
# Route Handlers
# =============================================================================

@api.route('/api/group', methods=['POST'])
def api_group():
    """Group ungrouped images in the background."""
    return _start_job(regroup=False)


@api.route('/api/regroup', methods=['POST'])
def api_regroup():
    """Disband every group and group from scratch in the background."""
    return _start_job(regroup=True)


@api.route('/api/abort', methods=['POST'])
def api_abort():
    """Abort the current grouping run."""
    if _job().request_abort():
        return jsonify({'status': 'abort_requested'})
    return jsonify({'status': 'no_run_in_progress'})


@api.route('/api/disband', methods=['POST'])
def api_disband():
    """Disband every group."""
    if _job().is_running:
        return jsonify({'error': 'A grouping run is in progress'}), 409
    count = AutoGrouper(_store()).disband_all_groups()
    return jsonify({'status': 'disbanded', 'count': count})


@api.route('/api/ping')
def api_ping():
    """Health check endpoint."""
    return jsonify({'status': 'ok', 'time': datetime.now().isoformat()})


@api.route('/api/status')
def api_status():
    """Get current grouping status."""
    return jsonify(_job().to_dict())


@api.route('/api/groups')
def api_groups():
    """Get all groups with their member records."""
    store = _store()
    groups = store.list_groups()
    member_ids = [member_id for group in groups for member_id in group.member_ids]
    images = store.get_images(member_ids)

    result = []
    for group in groups:
        entry = group.to_dict()
        entry['images'] = [
            images[member_id].to_dict() for member_id in group.member_ids
            if member_id in images
        ]
        result.append(entry)
    return jsonify({'groups': result, 'count': len(result)})


@api.route('/api/groups/<group_id>')
def api_group_detail(group_id):
    """Get one group with its member records."""
    store = _store()
    group = store.get_group(group_id)
    if group is None:
        return jsonify({'error': 'Group not found'}), 404

    images = store.get_images(group.member_ids)
    entry = group.to_dict()
    entry['images'] = [
        images[member_id].to_dict() for member_id in group.member_ids
        if member_id in images
    ]
    return jsonify(entry)


@api.route('/api/stats')
def api_stats():
    """Get library statistics as last recomputed."""
    return jsonify(_store().get_project_stats().to_dict())
