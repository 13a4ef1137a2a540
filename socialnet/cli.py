# socialnet/cli.py
import typer

from socialnet.config import ADMIN_PAGE_SIZE, DEFAULT_PAGE_SIZE, configure_logging
from socialnet.db import get_session, init_db, wait_for_database
from socialnet.errors import SocialNetError
from socialnet.services import accounts, graph, moderation, seeder

app = typer.Typer(help="Social network backend CLI with subcommands")


@app.callback()
def main(log_level: str = typer.Option("WARNING", "--log-level", help="Logging level")):
    configure_logging(log_level.upper())


@app.command("init-db")
def init_db_cmd():
    """Wait for the database and create any missing tables."""
    try:
        wait_for_database()
        init_db()
    except Exception as e:
        typer.echo(f"❌ Database initialisation failed: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("✓ Database schema ready")


@app.command("seed")
def seed_cmd(
    users: int = typer.Option(200, help="Number of accounts"),
    posts: int = typer.Option(2000, help="Number of posts"),
    messages: int = typer.Option(500, help="Number of direct messages"),
):
    """Populate the database with mock data."""
    seeder.seed_random_generators()

    with get_session() as db:
        us = seeder.make_accounts(db, users)
        edges = seeder.make_follows(db, us)
        ps = seeder.make_posts(db, us, posts)
        cs = seeder.make_comments(db, ps, us, frac_with_threads=0.6)
        seeder.make_engagements(db, ps, us)
        seeder.make_messages(db, us, messages)
        reported = seeder.make_reports(db, ps)
    typer.echo(
        f"Seed complete: accounts={users}, follows={edges}, posts={posts}, "
        f"comments={len(cs)}, messages={messages}, reported={reported}"
    )


@app.command("create-account")
def create_account_cmd(
    handle: str = typer.Argument(..., help="Unique handle (3-30 letters, digits or underscores)"),
    email: str = typer.Argument(..., help="Unique email address"),
    display_name: str = typer.Option("", "--name", "-n", help="Display name (defaults to the handle)"),
    admin: bool = typer.Option(False, "--admin", help="Grant moderation rights"),
):
    """Register an account."""
    try:
        with get_session() as db:
            account = accounts.create_account(db, handle, email, display_name=display_name, is_admin=admin)
            typer.echo(f"✓ Created account #{account.id} @{account.handle}{' (admin)' if admin else ''}")
    except SocialNetError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)


@app.command("feed")
def feed_cmd(
    account_id: int = typer.Argument(..., help="Account whose feed to show", min=1),
    page: int = typer.Option(1, "--page", "-p", min=1),
    limit: int = typer.Option(DEFAULT_PAGE_SIZE, "--limit", "-l", help="Posts per page (1-100)", min=1, max=100),
):
    """Show one page of an account's feed."""
    try:
        with get_session() as db:
            result = graph.compute_feed(db, account_id, page, limit)

            if not result.items:
                typer.echo(f"No posts on page {page} of account {account_id}'s feed")
                return

            typer.echo(f"\n📰 Feed for account {account_id} (page {result.page}/{result.total_pages}):")
            typer.echo("─" * 70)
            for post in result.items:
                body = post.body if len(post.body) <= 50 else post.body[:47] + "..."
                typer.echo(
                    f"#{post.id:<6} @{post.author.handle:<20} "
                    f"{post.created_at:%Y-%m-%d %H:%M}  ♥ {len(post.like_ids):<4} {body}"
                )
            typer.echo("─" * 70)
            typer.echo(f"Total posts: {result.total:,}")
    except SocialNetError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)


@app.command("reported")
def reported_cmd(
    kind: str = typer.Argument(..., help="Content type: 'post' or 'comment'"),
    page: int = typer.Option(1, "--page", "-p", min=1),
    limit: int = typer.Option(ADMIN_PAGE_SIZE, "--limit", "-l", min=1, max=100),
):
    """List reported content, highest report count first."""
    try:
        with get_session() as db:
            result = moderation.list_reported(db, kind, page, limit)

            if not result.items:
                typer.echo(f"No reported {kind}s")
                return

            typer.echo(f"\n🚩 Reported {kind}s ({result.total:,} total):")
            typer.echo("─" * 70)
            typer.echo(f"{'ID':<8} {'Reports':<8} {'Author':<20} Body")
            typer.echo("─" * 70)
            for item in result.items:
                body = item.body if len(item.body) <= 30 else item.body[:27] + "..."
                typer.echo(f"{item.id:<8} {item.report_count:<8} @{item.author.handle:<19} {body}")
    except SocialNetError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)


@app.command("analytics")
def analytics_cmd(
    period: str = typer.Option(
        moderation.DEFAULT_ANALYTICS_PERIOD, "--period", help="Window: 1d, 7d, 30d or 90d"
    ),
):
    """Platform analytics for a time window."""
    if period not in moderation.ANALYTICS_PERIODS:
        typer.echo(f"Unknown period {period!r}, using {moderation.DEFAULT_ANALYTICS_PERIOD}")
        period = moderation.DEFAULT_ANALYTICS_PERIOD

    with get_session() as db:
        stats = moderation.compute_analytics(db, moderation.period_start(period))

    typer.echo(f"\n📊 Platform Analytics (last {period}, since {stats['since']:%Y-%m-%d %H:%M}):")
    typer.echo("─" * 40)
    for section in ("users", "posts", "comments", "engagement"):
        typer.echo(f"{section.capitalize()}:")
        for key, value in stats[section].items():
            label = key.replace("_", " ")
            typer.echo(f"  {label:<24} {value:,}" if isinstance(value, int) else f"  {label:<24} {value}")


if __name__ == "__main__":
    app()
