from datetime import date, timedelta
from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import select
from ...access import AccessState, require_state
from ...extensions import db
from ...formatting import format_week_range
from ...forms import ValidationError, as_bool, read_block, read_date
from ...models import BlockedTime, TradeSchedule
from ...permissions import Capability, require_capability
from ...schedule import build_week, conflicting_trades, shift_week, week_days
from ...serializers import blocked_to_dict, trade_to_dict
from ...services.push_service import push_service
from ...services.trades import InvalidTransitionError, cancel_trade, cancel_trades

schedule_bp = Blueprint("location_schedule", __name__, url_prefix="/api/schedule")


def trades_between(location_id, start, end):
    return db.session.scalars(
        select(TradeSchedule)
        .where(
            TradeSchedule.location_id == location_id,
            TradeSchedule.selected_date >= start,
            TradeSchedule.selected_date <= end,
        )
        .order_by(TradeSchedule.selected_date, TradeSchedule.id)
    ).all()


def blocks_between(location_id, start, end):
    return db.session.scalars(
        select(BlockedTime)
        .where(
            BlockedTime.location_id == location_id,
            BlockedTime.date >= start,
            BlockedTime.date <= end,
        )
        .order_by(BlockedTime.date, BlockedTime.id)
    ).all()


def column_to_dict(column, blocks):
    return {
        "date": column.date.isoformat(),
        "weekday": column.date.strftime("%A"),
        "blocked": column.blocked,
        "blocks": [blocked_to_dict(b) for b in blocks if b.date == column.date],
        "trade_count": column.trade_count,
        "groups": [
            {
                "time": group.time,
                "label": group.label,
                "trades": [trade_to_dict(t) for t in group.trades],
            }
            for group in column.groups
        ],
    }


@schedule_bp.route("", methods=["GET"])
@require_state(AccessState.APPROVED)
def get_week():
    """
    Week grid of confirmed trades and blocked dates
    ---
    tags:
      - Schedule
    security:
      - Bearer: []
    parameters:
      - name: anchor
        in: query
        type: string
        format: date
        required: false
        description: Any date in the week to show (defaults to today)
      - name: offset
        in: query
        type: integer
        required: false
        description: Weeks to move from the anchor, e.g. -1 or 1
    responses:
      200:
        description: Seven day columns, Sunday through Saturday
      400:
        description: Invalid anchor or offset
    """
    try:
        anchor_arg = request.args.get("anchor")
        try:
            anchor = read_date(anchor_arg, "anchor") if anchor_arg else date.today()
            offset = int(request.args.get("offset", 0))
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400
        except ValueError:
            return jsonify({"status": "error", "message": "offset must be an integer"}), 400

        try:
            start = shift_week(anchor, offset)
            days = week_days(start)
            previous = days[0] - timedelta(days=7)
            following = days[0] + timedelta(days=7)
        except OverflowError:
            return jsonify({"status": "error", "message": "offset is out of range"}), 400

        location = g.portal.location

        trades = trades_between(location.id, days[0], days[-1])
        blocks = blocks_between(location.id, days[0], days[-1])
        columns = build_week(start, trades, blocks)

        return jsonify({
            "status": "success",
            "week_start": days[0].isoformat(),
            "week_end": days[-1].isoformat(),
            "label": format_week_range(days),
            "previous": previous.isoformat(),
            "next": following.isoformat(),
            "days": [column_to_dict(c, blocks) for c in columns],
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load schedule: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to load schedule",
            "details": str(e)
        }), 500


@schedule_bp.route("/trades/<int:schedule_id>/cancel", methods=["POST"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_SCHEDULE)
def cancel_scheduled_trade(schedule_id):
    """
    Cancel a confirmed trade at this location
    ---
    tags:
      - Schedule
    security:
      - Bearer: []
    description: >
      Both participants are notified on their devices. The cancellation
      stands even when the notification cannot be delivered.
    parameters:
      - in: path
        name: schedule_id
        type: integer
        required: true
    responses:
      200:
        description: Trade cancelled; notified tells whether the push went out
      404:
        description: Trade not found at this location
      409:
        description: Trade is not confirmed
    """
    try:
        location = g.portal.location
        schedule = db.session.get(TradeSchedule, schedule_id)
        if not schedule or schedule.location_id != location.id:
            return jsonify({"status": "error", "message": "Trade not found"}), 404

        try:
            result = cancel_trade(schedule, location, push_service)
        except InvalidTransitionError as e:
            return jsonify({"status": "error", "message": str(e)}), 409

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to cancel trade {schedule_id}: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to cancel trade",
            "details": str(e)
        }), 500

    # Cancellation is committed from here on
    payload = {
        "status": "success",
        "message": "Trade cancelled",
        "notified": bool(result.get("success")),
        "trade_id": schedule.id,
    }
    try:
        payload["trade"] = trade_to_dict(schedule)
    except Exception as e:
        current_app.logger.error(f"Cancelled trade {schedule_id} but could not serialize it: {e}")
    return jsonify(payload), 200


@schedule_bp.route("/blocked", methods=["GET"])
@require_state(AccessState.APPROVED)
def list_blocked_times():
    """
    Blocked dates and time ranges
    ---
    tags:
      - Schedule
    security:
      - Bearer: []
    parameters:
      - name: from
        in: query
        type: string
        format: date
        required: false
        description: Only blocks on or after this date
    responses:
      200:
        description: Blocked times ordered by date
    """
    try:
        statement = select(BlockedTime).where(
            BlockedTime.location_id == g.portal.location.id
        )
        if request.args.get("from"):
            try:
                since = read_date(request.args.get("from"), "from")
            except ValidationError as e:
                return jsonify({"status": "error", "message": e.message}), 400
            statement = statement.where(BlockedTime.date >= since)

        blocks = db.session.scalars(
            statement.order_by(BlockedTime.date, BlockedTime.id)
        ).all()

        return jsonify({
            "status": "success",
            "blocked": [blocked_to_dict(b) for b in blocks],
        }), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load blocked times: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to load blocked times",
            "details": str(e)
        }), 500


@schedule_bp.route("/blocked", methods=["POST"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_SCHEDULE)
def block_time():
    """
    Block a date or time range
    ---
    tags:
      - Schedule
    security:
      - Bearer: []
    description: >
      Confirmed trades that fall inside the block are returned as conflicts.
      They are only cancelled when cancel_conflicts is true.
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [date]
          properties:
            date:
              type: string
              format: date
            all_day:
              type: boolean
            start_time:
              type: string
            end_time:
              type: string
            reason:
              type: string
            cancel_conflicts:
              type: boolean
    responses:
      201:
        description: Block created, with conflicting trades
      400:
        description: Date missing or times invalid
    """
    try:
        data = request.get_json(silent=True) or {}
        try:
            fields = read_block(data)
        except ValidationError as e:
            return jsonify({"status": "error", "message": e.message, "field": e.field}), 400

        location = g.portal.location
        block = BlockedTime(location_id=location.id, **fields)
        db.session.add(block)
        db.session.commit()

        same_day = trades_between(location.id, block.date, block.date)
        conflicts = conflicting_trades(block, same_day)

        cancelled = []
        if conflicts and as_bool(data.get("cancel_conflicts", False)):
            cancelled = cancel_trades(conflicts, location, push_service)

        return jsonify({
            "status": "success",
            "message": "Time blocked",
            "blocked": blocked_to_dict(block),
            "conflicts": [trade_to_dict(t) for t in conflicts],
            "cancelled": cancelled,
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to block time: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to block time",
            "details": str(e)
        }), 500


@schedule_bp.route("/blocked/<int:block_id>", methods=["DELETE"])
@require_state(AccessState.APPROVED)
@require_capability(Capability.MANAGE_SCHEDULE)
def unblock_time(block_id):
    """
    Remove a blocked time
    ---
    tags:
      - Schedule
    security:
      - Bearer: []
    parameters:
      - in: path
        name: block_id
        type: integer
        required: true
    responses:
      200:
        description: Block removed
      404:
        description: Block not found
    """
    try:
        block = db.session.get(BlockedTime, block_id)
        if not block or block.location_id != g.portal.location.id:
            return jsonify({"status": "error", "message": "Blocked time not found"}), 404

        db.session.delete(block)
        db.session.commit()

        return jsonify({"status": "success", "message": "Blocked time removed"}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to remove blocked time {block_id}: {e}")
        return jsonify({
            "status": "error",
            "message": "Failed to remove blocked time",
            "details": str(e)
        }), 500
