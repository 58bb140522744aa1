"""Conversation reads, creation and private invitations."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vayam.core.settings import settings
from vayam.models import Comment, Conversation, Participant, User, Vote
from vayam.services.comments import submit_comment
from vayam.services.errors import AuthorizationError, NotFoundError, ValidationError
from vayam.services.notifications import DeliveryOutcome, Notification, Notifier, fan_out
from vayam.services.votes import Tallies, conversation_tallies

logger = logging.getLogger(__name__)

ROLE_INVITEE = "invitee"


@dataclass
class CommentView:
    """A comment with every current vote on it and the requester's own vote."""

    comment: Comment
    votes: list[Vote] = field(default_factory=list)
    user_vote: Vote | None = None

    @property
    def tallies(self) -> Tallies:
        """Return the counts computed from `votes`."""
        return Tallies(
            like_count=sum(1 for v in self.votes if v.vote == 1),
            dislike_count=sum(1 for v in self.votes if v.vote == -1),
            neutral_count=sum(1 for v in self.votes if v.vote == 0),
        )


@dataclass
class ConversationView:
    """Everything a voting session needs to start."""

    conversation: Conversation
    participant_count: int
    tallies: Tallies
    comments: list[CommentView]


@dataclass
class ConversationSummary:
    """Row of a conversation listing."""

    conversation: Conversation
    participant_count: int
    tallies: Tallies = field(default_factory=Tallies)
    comments_count: int = 0
    user_votes: list[Vote] = field(default_factory=list)


def get_conversation_or_404(db: Session, zid: int) -> Conversation:
    """Return the conversation or raise NotFoundError."""
    conversation = db.get(Conversation, zid)
    if conversation is None:
        raise NotFoundError("conversation")
    return conversation


def _participant_counts(db: Session, zids: list[int]) -> dict[int, int]:
    if not zids:
        return {}
    rows = db.execute(
        select(Participant.zid, func.count())
        .where(Participant.zid.in_(zids))
        .group_by(Participant.zid)
    ).all()
    return {zid: count for zid, count in rows}


def get_conversation_view(db: Session, zid: int, requesting_uid: int) -> ConversationView:
    """Load a conversation, all of its comments with votes, and the requester's votes.

    Hidden comments are included; filtering for the voting flow happens in
    the session engine so owners still see what they flagged.
    """
    conversation = get_conversation_or_404(db, zid)

    comments = list(
        db.scalars(
            select(Comment).where(Comment.zid == zid).order_by(Comment.created_at, Comment.tid)
        )
    )
    votes_by_tid: dict[int, list[Vote]] = defaultdict(list)
    for vote in db.scalars(select(Vote).where(Vote.zid == zid)):
        votes_by_tid[vote.tid].append(vote)

    views = []
    for comment in comments:
        votes = votes_by_tid.get(comment.tid, [])
        user_vote = next((v for v in votes if v.uid == requesting_uid), None)
        views.append(CommentView(comment=comment, votes=votes, user_vote=user_vote))

    return ConversationView(
        conversation=conversation,
        participant_count=_participant_counts(db, [zid]).get(zid, 0),
        tallies=conversation_tallies(db, zid),
        comments=views,
    )


def list_active_conversations(db: Session, uid: int) -> list[ConversationSummary]:
    """Return active conversations, newest first, with the user's own votes."""
    conversations = list(
        db.scalars(
            select(Conversation)
            .where(Conversation.is_active.is_(True))
            .order_by(Conversation.created_at.desc(), Conversation.zid.desc())
        )
    )
    zids = [c.zid for c in conversations]
    counts = _participant_counts(db, zids)

    votes_by_zid: dict[int, list[Vote]] = defaultdict(list)
    for vote in db.scalars(select(Vote).where(Vote.uid == uid)):
        votes_by_zid[vote.zid].append(vote)

    return [
        ConversationSummary(
            conversation=c,
            participant_count=counts.get(c.zid, 0),
            comments_count=c.comments_count,
            user_votes=votes_by_zid.get(c.zid, []),
        )
        for c in conversations
    ]


def list_owned_conversations(db: Session, uid: int) -> list[ConversationSummary]:
    """Return the conversations owned by `uid` with live aggregate counts."""
    conversations = list(
        db.scalars(select(Conversation).where(Conversation.owner == uid).order_by(Conversation.zid))
    )
    zids = [c.zid for c in conversations]
    counts = _participant_counts(db, zids)

    comment_counts: dict[int, int] = {}
    if zids:
        comment_counts = dict(
            db.execute(
                select(Comment.zid, func.count()).where(Comment.zid.in_(zids)).group_by(Comment.zid)
            ).all()
        )

    return [
        ConversationSummary(
            conversation=c,
            participant_count=counts.get(c.zid, 0),
            tallies=conversation_tallies(db, c.zid),
            comments_count=comment_counts.get(c.zid, 0),
        )
        for c in conversations
    ]


def _unique(emails: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(e.strip() for e in emails if e and e.strip()))


def create_conversation(
    db: Session,
    owner_uid: int,
    *,
    topic: str,
    description: str,
    is_active: bool = True,
    is_public: bool = True,
    allowed_emails: Iterable[str] = (),
    seed_comment: str | None = None,
) -> Conversation:
    """Create a conversation owned by `owner_uid`, optionally with a seed comment.

    Private conversations keep their invitee list; public ones never store one.

    Raises:
        NotFoundError: If the owner is unknown.
        ValidationError: If a private conversation has no allowed email.
    """
    if db.get(User, owner_uid) is None:
        raise NotFoundError("user", "Specified owner does not exist")

    invitees = [] if is_public else _unique(allowed_emails)
    if not is_public and not invitees:
        raise ValidationError("Private conversations require at least one allowed email")

    conversation = Conversation(
        topic=topic,
        description=description,
        owner=owner_uid,
        is_active=is_active,
        is_public=is_public,
        allowed_emails=invitees,
    )
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    logger.info(
        "Conversation created zid=%s owner=%s public=%s", conversation.zid, owner_uid, is_public
    )

    if seed_comment:
        submit_comment(db, owner_uid, conversation.zid, seed_comment, is_seed=True)
        db.refresh(conversation)
    return conversation


def add_allowed_emails(
    db: Session,
    acting_uid: int,
    zid: int,
    emails: Iterable[str],
) -> tuple[Conversation, list[str]]:
    """Append invitees to a private conversation.

    Returns the conversation and the addresses that were not invited before,
    in request order.

    Raises:
        NotFoundError: If the conversation does not exist.
        AuthorizationError: If `acting_uid` does not own the conversation.
        ValidationError: If the conversation is public.
    """
    conversation = get_conversation_or_404(db, zid)
    if conversation.owner != acting_uid:
        raise AuthorizationError("Only conversation owner can invite participants")
    if conversation.is_public:
        raise ValidationError("Cannot update emails for public conversation")

    current = list(conversation.allowed_emails or [])
    added = [email for email in _unique(emails) if email not in current]
    if added:
        # Assign a new list so the JSON column is marked dirty.
        conversation.allowed_emails = current + added
        db.commit()
        db.refresh(conversation)
    logger.info("Conversation zid=%s invited %s new address(es)", zid, len(added))
    return conversation, added


def build_invitations(conversation: Conversation, emails: Iterable[str]) -> list[Notification]:
    """Compose one invitation per address for a private conversation."""
    link = f"{settings.public_base_url.rstrip('/')}/conversations/{conversation.zid}"
    subject = f"You've been invited to join a private conversation: {conversation.topic}"
    body = (
        f"You have been invited to take part in a private conversation on {settings.app_name}.\n\n"
        f"Join here: {link}\n\n"
        f"Questions? Contact {settings.admin_email}."
    )
    return [Notification(role=ROLE_INVITEE, to=email, subject=subject, body=body) for email in emails]


async def send_invitations(
    notifier: Notifier,
    conversation: Conversation,
    emails: Iterable[str],
) -> list[DeliveryOutcome]:
    """Deliver invitations best-effort; failures are reported, never raised."""
    invitations = build_invitations(conversation, emails)
    if not invitations:
        return []
    return await fan_out(notifier, invitations)
