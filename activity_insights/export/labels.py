"""
Human-readable labels for activity event types.

Known types map to curated display phrasing; anything else falls back to a
title-cased rendering of the token, so unknown types never break rendering.
"""

from typing import Dict, Mapping, Optional

TYPE_LABELS: Dict[str, str] = {
    "lead_created": "Lead created",
    "lead_updated": "Lead updated",
    "lead_score_updated": "Lead score updated",
    "lead_added_to_list": "Lead added to list",
    "lead_removed_from_list": "Lead removed from list",
    "email_found": "Email found",
    "email_verified": "Email verified",
    "campaign_created": "Campaign created",
    "campaign_sent": "Campaign sent",
    "campaign_outcome_imported": "Campaign outcomes imported",
    "campaign_event": "Campaign event",
    "task_created": "Task created",
    "task_completed": "Task completed",
    "task_cancelled": "Task cancelled",
    "note_added": "Note added",
    "playbook_run": "Playbook run",
    "playbook_completed": "Playbook completed",
    "list_created": "List created",
    "list_marked_campaign_ready": "List ready",
    "job_created": "Job created",
    "job_completed": "Job completed",
    "job_failed": "Job failed",
    "integration_connected": "Integration connected",
    "integration_disconnected": "Integration disconnected",
    "workspace_created": "Workspace created",
    "member_invited": "Member invited",
    "member_joined": "Member joined",
    "deal_created": "Deal created",
    "deal_stage_changed": "Deal stage changed",
    "deal_won": "Deal won",
    "deal_lost": "Deal lost",
    "deal_updated": "Deal updated",
}


def humanize_type(event_type: str) -> str:
    """
    Generic label: underscores become spaces and each word is capitalized.

    Example:
        "lead_score_updated" -> "Lead Score Updated"
    """
    words = [w for w in str(event_type).split("_") if w]
    if not words:
        return "Unknown"
    return " ".join(w[:1].upper() + w[1:] for w in words)


def format_type_label(
    event_type: str,
    label_map: Optional[Mapping[str, str]] = None,
    raw_fallback: bool = False,
) -> str:
    """
    Display label for an event type.

    Args:
        event_type: Event type token
        label_map: Override mapping (defaults to TYPE_LABELS)
        raw_fallback: Return the raw token for unmapped types instead of
            the humanized form (summary CSV rows use the raw token)

    Returns:
        Mapped label, or the generic humanized form for unmapped types
    """
    labels = TYPE_LABELS if label_map is None else label_map
    label = labels.get(event_type)
    if label:
        return label
    if raw_fallback and event_type:
        return str(event_type)
    return humanize_type(event_type)
