from __future__ import annotations

from datetime import datetime, timezone

from github import Auth, BadCredentialsException, Github, GithubException

from prmemory_core.errors import AuthenticationError
from prmemory_core.models import ChangedFile, LinkedIssueStub, PullRequestRecord, ReviewComment

DIFF_MEDIA_TYPE = "application/vnd.github.diff"


def get_client(token: str, per_page: int = 30, timeout: int = 30) -> Github:
    return Github(auth=Auth.Token(token), per_page=per_page, timeout=timeout)


def get_authenticated_login(gh: Github) -> str:
    """Return the login for the token's user; an invalid token raises AuthenticationError."""
    try:
        return gh.get_user().login
    except BadCredentialsException as e:
        raise AuthenticationError("GitHub rejected the token. Run `gh auth login` or set a valid GITHUB_TOKEN.") from e
    except GithubException as e:
        # Rate limits and outages also stop the run before collection.
        raise AuthenticationError(f"Could not verify the GitHub token: {e.status} {e.data}") from e


def merged_prs_query(login: str) -> str:
    return f"author:{login} is:merged type:pr"


def search_merged(gh: Github, login: str):
    return gh.search_issues(merged_prs_query(login), sort="updated", order="desc")


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def to_record(pull) -> PullRequestRecord:
    return PullRequestRecord(
        repo_full_name=pull.base.repo.full_name,
        number=pull.number,
        title=pull.title or "",
        body=pull.body,
        created_at=_iso(pull.created_at),
        merged_at=_iso(pull.merged_at),
        html_url=pull.html_url,
        api_url=pull.url,
    )


def get_changed_files(pull) -> tuple[ChangedFile, ...]:
    return tuple(
        ChangedFile(
            filename=f.filename,
            status=f.status,
            additions=f.additions,
            deletions=f.deletions,
            patch=f.patch,
        )
        for f in pull.get_files()
    )


def get_review_comments(pull) -> tuple[ReviewComment, ...]:
    return tuple(
        ReviewComment(path=c.path, body=c.body or "", diff_hunk=c.diff_hunk) for c in pull.get_review_comments()
    )


def get_issue_stub(repo, number: int) -> LinkedIssueStub:
    issue = repo.get_issue(number)
    return LinkedIssueStub(number=number, title=issue.title or "", body=issue.body or "")


def pull_api_url(record: PullRequestRecord) -> str:
    if record.api_url:
        return record.api_url
    return f"https://api.github.com/repos/{record.owner}/{record.repo}/pulls/{record.number}"
