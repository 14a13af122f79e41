import asyncio
import enum
import sys

from rich.pretty import pprint

from reflectargs import *


class Track(enum.Enum):
    upstream = "upstream"
    origin = "origin"


@command
def git(verbose: bool = False):
    """The stupid content tracker"""
    if verbose:
        pprint(git)


@git.command
@describe(repo="repository to clone", recursive="initialize submodules too")
def clone(repo: str, recursive: bool = False, depth: UInt32 | None = None):
    """Clone a repository into a new directory"""
    print("cloning %s (recursive=%s, depth=%s)" % (repo, recursive, depth))


@git.command
def branch(names: list[str], delete: bool = False):
    """List, create, or delete branches"""
    print("%s branches: %s" % ("deleting" if delete else "creating", ", ".join(names)))


@git.command
async def push(remote: str = "origin", force: bool = False, tags: list[str] | None = None):
    """Update remote refs along with associated objects"""
    await asyncio.sleep(0)
    print("pushing to %s (force=%s, tags=%s)" % (remote, force, tags))


@git.command
def pull(rebase: bool = False, track: Track = Track.origin):
    """Fetch from and integrate with another repository"""
    print("pulling from %s (rebase=%s)" % (track.name, rebase))


remote = Command("remote", "Manage set of tracked repositories")
git.add_command(remote)


@remote.command
@describe(name="name of the remote", fetch="fetch right away")
def add(name: str, url: str, fetch: bool = False):
    """Add a remote"""
    print("adding remote %s at %s (fetch=%s)" % (name, url, fetch))


@remote.command(name="remove")
def remove_remote(name: str):
    """Remove a remote"""
    print("removing remote %s" % name)


if __name__ == '__main__':
    sys.exit(git.handle())
