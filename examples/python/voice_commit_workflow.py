#!/usr/bin/env python3
"""
VoiceCommit - Complete Voice Request Workflow Example

This example demonstrates the full request lifecycle across two devices:
1. Pair a primary device and a satellite over a loopback link
2. Sign in on the primary device and sync the token to the satellite
3. Select or create a repository
4. Turn a transcript into generated files and review them
5. Approve and commit the files

With VOICECOMMIT_GITHUB_TOKEN set the example talks to the real GitHub API
and writes to VOICECOMMIT_EXAMPLE_REPO (owner/name). Without it an in-process
fake GitHub is used, so nothing leaves the machine.
"""

import asyncio
import os
import sys

from voicecommit import AppConfig, VoiceCommitApp
from voicecommit.exceptions import VoiceCommitError
from voicecommit.sync import DeviceSyncChannel, LoopbackLink
from voicecommit.testing import SAMPLE_TOKEN, FakeGitHubAPI
from voicecommit.types.auth import AuthToken


async def run(transcript: str) -> None:
    """Run the complete voice request workflow."""
    print("=== VoiceCommit Example ===\n")

    token_value = os.environ.get("VOICECOMMIT_GITHUB_TOKEN")
    repo_name = os.environ.get("VOICECOMMIT_EXAMPLE_REPO", "octocat/voice-demo")

    fake = None
    if token_value is None:
        fake = FakeGitHubAPI()
        fake.add_repository(repo_name)
        token_value = SAMPLE_TOKEN

    # Step 1: Pair the devices
    print("1. Pairing primary device and satellite...")
    link = LoopbackLink()
    primary = DeviceSyncChannel(link.primary, auto_request=False)
    app = VoiceCommitApp(
        AppConfig.from_env(),
        link.satellite,
        github_http_transport=fake.transport() if fake else None,
    )
    print(f"   Satellite state: {app.coordinator.state.value}")

    async with app:
        try:
            # Step 2: Sign in on the primary device
            print("\n2. Syncing token from the primary device...")
            mode = await primary.send_token(AuthToken.from_value(token_value), "octocat")
            print(f"   Delivered: {mode.value}")
            print(f"   Satellite state: {app.coordinator.state.value}")

            # Step 3: Pick the target repository
            print("\n3. Listing repositories...")
            repos = await app.coordinator.list_repositories()
            print(f"   Found {len(repos)} repository(ies)")
            repo = next((r for r in repos if r.full_name == repo_name), None)
            if repo is None:
                print(f"   {repo_name} not found, creating it...")
                repo = await app.coordinator.create_repository(
                    repo_name.split("/")[-1], description="Created by voice"
                )
            else:
                app.coordinator.select_repository(repo)
            print(f"   Selected: {repo.full_name} ({repo.default_branch})")

            # Step 4: Generate
            print(f'\n4. Generating files for "{transcript}"...')
            result = await app.coordinator.submit_transcript(transcript)
            print(f"   Summary: {result.summary}")
            for change in result.files:
                print(f"   - {change.path} ({len(change.content)} chars)")

            # Step 5: Approve
            print("\n5. Committing...")
            records = await app.coordinator.approve()
            for record in records:
                print(f"   - {record.path} @ {record.commit_sha[:7]}")

            print("\n=== Workflow Complete ===")
            print(f"\nSummary:")
            print(f"  Repository: {repo.full_name}")
            print(f"  Commit message: {result.commit_message}")
            if fake is not None:
                print(f"  Fake API calls: {len(fake.calls)}")

        except VoiceCommitError as e:
            print(f"\nError: [{e.code}] {e.message}")
            print(f"Coordinator state: {app.coordinator.state.value}")
            sys.exit(1)


def main() -> None:
    transcript = " ".join(sys.argv[1:]) or "build me a todo app"
    asyncio.run(run(transcript))


if __name__ == "__main__":
    main()
