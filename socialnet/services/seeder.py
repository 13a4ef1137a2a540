"""
Mock data for local development.

Everything is created through the service layer so the seeded data obeys
the same invariants as API traffic (link tables, notifications, counters).
"""

from __future__ import annotations

import random
import re
from typing import Sequence

from faker import Faker
from sqlalchemy.orm import Session

from socialnet.models import Account, Comment, Post
from socialnet.services import accounts, chat, comments, engagement, graph

SEED = 1337

fake = Faker()

TOPICS = [
    "python", "fastapi", "travel", "food", "music", "sports", "gaming", "fitness",
    "photography", "books", "startup", "news",
]


def seed_random_generators(seed: int = SEED) -> None:
    """Seed ``random`` and the module Faker so repeated runs produce the same data."""
    random.seed(seed)
    Faker.seed(seed)
    fake.seed_instance(seed)
    fake.unique.clear()


def make_accounts(db: Session, n_accounts: int, admins: int = 1) -> list[Account]:
    made = []
    for i in range(n_accounts):
        handle = re.sub(r"[^a-zA-Z0-9_]", "_", fake.unique.user_name())[:24] + str(i)
        made.append(
            accounts.create_account(
                db,
                handle=handle,
                email=f"{handle}@{fake.free_email_domain()}",
                display_name=fake.name(),
                bio=fake.sentence(nb_words=8),
                is_admin=i < admins,
            )
        )
    return made


def make_follows(db: Session, users: Sequence[Account], avg_following: int = 8) -> int:
    """Each account follows a random subset of the others."""
    edges = 0
    for u in users:
        others = [o for o in users if o.id != u.id]
        k = min(len(others), random.randint(0, avg_following * 2))
        for target in random.sample(others, k):
            if graph.follow(db, u.id, target.id).is_following:
                edges += 1
    return edges


def make_posts(db: Session, users: Sequence[Account], n_posts: int) -> list[Post]:
    posts: list[Post] = []
    for _ in range(n_posts):
        u = random.choice(users)
        tags = random.sample(TOPICS, random.randint(0, 3))
        media = []
        if random.random() < 0.2:
            media.append({"kind": random.choice(("image", "video")), "url": fake.image_url()})
        posts.append(
            engagement.create_post(
                db,
                u.id,
                body=fake.sentence(nb_words=random.randint(8, 20)),
                media=media,
                tags=tags,
                location=fake.city() if random.random() < 0.3 else None,
            )
        )
    return posts


def make_comments(db: Session, posts: Sequence[Post], users: Sequence[Account], frac_with_threads=0.6) -> list[Comment]:
    """Top-level comments on a share of the posts, some with one level of replies."""
    made: list[Comment] = []
    for p in posts:
        if random.random() >= frac_with_threads:
            continue
        for _ in range(random.randint(1, 4)):
            root = comments.add_comment(db, random.choice(users).id, p.id, fake.sentence()).comment
            made.append(root)
            for _ in range(random.randint(0, 3)):
                reply = comments.add_comment(db, random.choice(users).id, p.id, fake.sentence(), root.id)
                made.append(reply.comment)
    return made


def make_engagements(db: Session, posts: Sequence[Post], users: Sequence[Account]) -> None:
    """
    Scatter likes and shares with a like:share ratio of roughly 5:1.
    """
    for p in posts:
        likers = random.sample(list(users), min(len(users), random.randint(0, 15)))
        for u in likers:
            engagement.toggle_like(db, u.id, p.id)
        for u in likers[: len(likers) // 5]:
            engagement.toggle_share(db, u.id, p.id)
    db.flush()


def make_messages(db: Session, users: Sequence[Account], n_messages: int) -> None:
    if len(users) < 2:
        return
    for _ in range(n_messages):
        sender, receiver = random.sample(list(users), 2)
        chat.send_message(db, sender.id, receiver.id, fake.sentence(nb_words=random.randint(3, 15)))


def make_reports(db: Session, posts: Sequence[Post], fraction: float = 0.05) -> int:
    reported = 0
    for p in posts:
        if random.random() < fraction:
            if engagement.report_post(db, p.author_id, p.id).counted:
                reported += 1
    return reported
