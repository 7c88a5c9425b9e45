# tests/test_local_vault.py
"""Tests for the directory-backed vault."""

import asyncio
import os

import pytest

from writing_tracker.goals.errors import NotFound


def touch_later(file_path, content):
    """Rewrite a file and push its mtime forward so a scan sees it."""
    file_path.write_text(content, encoding="utf-8")
    stat = file_path.stat()
    os.utime(file_path, (stat.st_atime, stat.st_mtime + 5))


class TestLocalVaultReads:
    """Tests for reading and listing."""

    @pytest.mark.asyncio
    async def test_read_file(self, vault, write_note):
        write_note("book/one.md", "hello world")
        assert await vault.read_file("book/one.md") == "hello world"

    @pytest.mark.asyncio
    async def test_read_missing_file(self, vault):
        with pytest.raises(NotFound):
            await vault.read_file("ghost.md")

    @pytest.mark.asyncio
    async def test_read_folder_is_not_found(self, vault, write_note):
        write_note("book/one.md", "x")
        with pytest.raises(NotFound):
            await vault.read_file("book")

    @pytest.mark.asyncio
    async def test_read_outside_vault_rejected(self, vault, tmp_path):
        (tmp_path / "secret.md").write_text("nope")
        with pytest.raises(NotFound):
            await vault.read_file("../secret.md")

    @pytest.mark.asyncio
    async def test_list_markdown_files_direct_children_only(self, vault, write_note):
        write_note("book/a.md", "a")
        write_note("book/b.md", "b")
        write_note("book/cover.png", "")
        write_note("book/part1/c.md", "c")

        assert await vault.list_markdown_files("book") == ["book/a.md", "book/b.md"]

    @pytest.mark.asyncio
    async def test_list_markdown_files_root(self, vault, write_note):
        write_note("top.md", "a")
        write_note("book/a.md", "a")

        assert await vault.list_markdown_files("/") == ["top.md"]

    @pytest.mark.asyncio
    async def test_list_markdown_files_missing_folder(self, vault):
        assert await vault.list_markdown_files("nowhere") == []

    @pytest.mark.asyncio
    async def test_list_files_skips_hidden(self, vault, write_note):
        write_note("top.md", "a")
        write_note(".obsidian/workspace.json", "{}")
        write_note("book/a.md", "a")

        assert await vault.list_files() == ["book/a.md", "top.md"]

    @pytest.mark.asyncio
    async def test_list_targets(self, vault, write_note):
        write_note("top.md", "a")
        write_note("book/a.md", "a")

        assert await vault.list_targets() == ["book/a.md", "top.md", "book"]

    def test_parent_folder(self, vault):
        assert vault.get_parent_folder("book/a.md") == "book"
        assert vault.get_parent_folder("top.md") == "/"


class TestLocalVaultWatch:
    """Tests for modification polling."""

    def test_first_scan_reports_everything(self, vault, write_note):
        write_note("a.md", "a")
        assert vault.scan_changes() == ["a.md"]

    def test_scan_reports_modified_and_new(self, vault, write_note):
        a = write_note("a.md", "a")
        write_note("b.md", "b")
        vault.scan_changes()

        touch_later(a, "a a")
        write_note("c.md", "c")

        assert vault.scan_changes() == ["a.md", "c.md"]
        assert vault.scan_changes() == []

    @pytest.mark.asyncio
    async def test_watch_calls_back_for_changes(self, vault, write_note):
        a = write_note("a.md", "a")
        seen = []

        async def on_change(path, content):
            seen.append((path, content))

        task = asyncio.create_task(vault.watch(on_change))
        await asyncio.sleep(vault.poll_interval / 2)
        touch_later(a, "a b")
        await asyncio.sleep(vault.poll_interval * 3)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert seen == [("a.md", None)]
