"""Tests for title/body placeholder substitution."""

from dataclasses import replace

import pytest

from crosspick.utils.placeholders import find_issue_refs, render

TARGET = "foo-target"


@pytest.fixture
def main_pull(pull):
    return replace(pull, number=123, body="foo-body", author="foo-author", title="some pr title")


TEXT = """{start} foo bar
bar bar {middle} bar

foo/{part} foo{part}foo {part}foo

foo bar bar foo {end}"""


class TestUnchangedTemplates:
    def test_empty_template(self, main_pull):
        assert render("", main_pull, TARGET) == ""

    def test_template_without_placeholders(self, main_pull):
        template = TEXT.format(start="", middle="", part="", end="")
        assert render(template, main_pull, TARGET) == template

    def test_unknown_placeholders_are_kept(self, main_pull):
        template = TEXT.format(start="${abc}", middle="${def}", part="${jkl}", end="${ghi}")
        assert render(template, main_pull, TARGET) == template


class TestEvaluatedTemplates:
    def test_target_branch(self, main_pull):
        template = "Backport of some-title to `${target_branch}`"
        assert render(template, main_pull, TARGET) == "Backport of some-title to `foo-target`"

    def test_pull_number_and_target(self, main_pull):
        template = "Backport of #${pull_number} to ${target_branch}"
        assert render(template, main_pull, "release-2") == "Backport of #123 to release-2"

    def test_pull_title(self, main_pull):
        template = "Backport of ${pull_title} to some-target"
        assert render(template, main_pull, TARGET) == "Backport of some pr title to some-target"

    def test_pull_author(self, main_pull):
        template = "Backport of pull made by @${pull_author}"
        assert render(template, main_pull, TARGET) == "Backport of pull made by @foo-author"

    def test_pull_description(self, main_pull):
        assert render("${pull_description}", main_pull, TARGET) == "foo-body"

    def test_owner_and_repo(self, main_pull):
        assert render("${owner}/${repo}", main_pull, TARGET, "acme", "widgets") == "acme/widgets"

    def test_every_occurrence_is_replaced(self, main_pull):
        assert render("${pull_number} ${pull_number}", main_pull, TARGET) == "123 123"

    def test_inserted_values_are_not_substituted_again(self, main_pull):
        sneaky = replace(main_pull, title="${target_branch}")
        assert render("${pull_title}", sneaky, TARGET) == "${target_branch}"


class TestIssueRefs:
    TEMPLATE = "Backport that refers to: ${issue_refs}"

    def test_no_referred_issues(self, main_pull):
        assert render(self.TEMPLATE, main_pull, TARGET) == "Backport that refers to: "

    def test_one_referred_issue(self, main_pull):
        pull = replace(main_pull, body="Body mentions #123 and that's it.")
        assert render(self.TEMPLATE, pull, TARGET) == "Backport that refers to: #123"

    def test_several_referred_issues(self, main_pull):
        pull = replace(main_pull, body="This body refers to #123 and foo/bar#456")
        assert render(self.TEMPLATE, pull, TARGET) == "Backport that refers to: #123 foo/bar#456"

    def test_empty_body(self):
        assert find_issue_refs("") == ""

    def test_hash_inside_word_is_not_a_reference(self):
        assert find_issue_refs("see abc#12 or C#7") == ""
