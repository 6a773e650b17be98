"""Tests for Gemfile updates."""

from pathlib import Path

import pytest
from conftest import write
from upshift.transforms.gemfile import (
  BOOTSNAP_GEM,
  BOOTSNAP_NOTICE,
  update_gemfile,
  update_gemfile_content,
)

LEGACY_GEMFILE = """source 'https://rubygems.org'

ruby '2.6.6'

gem 'rails', '~> 5.2.0'
gem 'sass-rails', '~> 5.0'
gem 'uglifier', '>= 1.3.0'
gem 'coffee-rails', '~> 4.2'
gem 'jquery-rails'
gem 'protected_attributes'
gem 'nokogiri'
gem 'bootsnap', require: false
"""


class TestUpdateGemfileContent:
  def test_rails_7_pins(self) -> None:
    updated = update_gemfile_content(LEGACY_GEMFILE, "7.0.0")

    assert "gem 'rails', '~> 7.0.0'" in updated
    assert "gem 'cssbundling-rails'\n" in updated
    assert "gem 'jsbundling-rails'\n" in updated
    assert "# gem 'coffee-rails' # Removed in Rails 7" in updated
    assert "# gem 'jquery-rails'" in updated
    assert "# gem 'protected_attributes' # Removed in Rails 5" in updated
    assert "sass-rails" not in updated
    assert "uglifier" not in updated

  def test_rails_6_comments_coffee(self) -> None:
    updated = update_gemfile_content(LEGACY_GEMFILE, "6.1.0")

    assert "gem 'rails', '~> 6.1.0'" in updated
    assert "# gem 'coffee-rails' # Consider using webpacker in Rails 6" in updated
    assert "gem 'sass-rails', '~> 5.0'" in updated
    assert "gem 'jquery-rails'\n" in updated

  def test_nokogiri_pinned_for_ruby(self) -> None:
    updated = update_gemfile_content(LEGACY_GEMFILE, "6.1.0")
    assert "gem 'nokogiri', '~> 1.13.10' # Pinned for Ruby 2.6.x compatibility" in updated

  def test_rspec_pinned_for_rails_5(self) -> None:
    content = "ruby '2.5.8'\ngem 'rails', '~> 4.2.0'\ngem 'rspec-rails', '~> 3.5'\n"
    updated = update_gemfile_content(content, "5.2.0")

    assert "gem 'rails', '~> 5.2.0'" in updated
    assert "gem 'rspec-rails', '~> 4.0'" in updated
    assert "~> 3.5" not in updated

  def test_bootsnap_added_for_rails_5(self) -> None:
    content = "ruby '2.5.8'\ngem 'rails', '~> 4.2.0'\n"
    updated = update_gemfile_content(content, "5.2.0")
    assert updated.endswith(f"\n{BOOTSNAP_NOTICE}\n{BOOTSNAP_GEM}\n")

  def test_bootsnap_not_duplicated(self) -> None:
    updated = update_gemfile_content(LEGACY_GEMFILE, "5.2.0")
    assert BOOTSNAP_NOTICE not in updated

  def test_ruby_directive_prepended(self) -> None:
    content = "source 'https://rubygems.org'\ngem 'rails', '~> 6.0.0'\n"
    updated = update_gemfile_content(content, "7.0.0")
    assert updated.startswith("ruby '3.0.0'\n")

  def test_existing_ruby_directive_kept(self) -> None:
    updated = update_gemfile_content(LEGACY_GEMFILE, "7.0.0")
    assert updated.count("ruby '") == 1
    assert "ruby '2.6.6'" in updated

  @pytest.mark.parametrize("directive", ["ruby '3.1'", 'ruby "~> 3.1.2"', "ruby file: '.ruby-version'"])
  def test_any_ruby_directive_counts(self, directive: str) -> None:
    content = f"{directive}\ngem 'rails', '~> 6.1.0'\n"
    updated = update_gemfile_content(content, "7.0.0")

    assert updated.startswith(f"{directive}\n")
    assert "ruby '3.0.0'" not in updated

  def test_requirement_directive_pins_nokogiri(self) -> None:
    content = "ruby \"~> 2.6.3\"\ngem 'rails', '~> 5.2.0'\ngem 'nokogiri'\n"
    updated = update_gemfile_content(content, "6.1.0")
    assert "gem 'nokogiri', '~> 1.13.10' # Pinned for Ruby 2.6.x compatibility" in updated

  def test_idempotent(self) -> None:
    once = update_gemfile_content(LEGACY_GEMFILE, "7.0.0")
    assert update_gemfile_content(once, "7.0.0") == once

  def test_idempotent_without_ruby_directive(self) -> None:
    content = "gem 'rails', '~> 4.2.0'\ngem 'nokogiri'\ngem 'rspec-rails'\n"
    once = update_gemfile_content(content, "5.2.0")
    assert update_gemfile_content(once, "5.2.0") == once

  def test_commented_lines_left_alone(self) -> None:
    content = "ruby '3.0.0'\ngem 'rails', '~> 7.0.0'\n# gem 'coffee-rails'\n"
    assert update_gemfile_content(content, "7.0.0") == content

  def test_unsupported_target_unchanged(self) -> None:
    assert update_gemfile_content(LEGACY_GEMFILE, "4.2.0") == LEGACY_GEMFILE


class TestUpdateGemfile:
  def test_writes_gemfile(self, tmp_path: Path) -> None:
    path = write(tmp_path, "Gemfile", LEGACY_GEMFILE)

    assert update_gemfile(tmp_path, "7.0.0") == ["Gemfile"]
    assert "gem 'rails', '~> 7.0.0'" in path.read_text()

  def test_no_change_reported_once_updated(self, tmp_path: Path) -> None:
    write(tmp_path, "Gemfile", LEGACY_GEMFILE)
    update_gemfile(tmp_path, "7.0.0")
    assert update_gemfile(tmp_path, "7.0.0") == []

  def test_missing_gemfile(self, tmp_path: Path) -> None:
    assert update_gemfile(tmp_path, "7.0.0") == []
