"""Pytest fixtures."""

from pathlib import Path

import pytest
from upshift.rules.extensions import extensions
from upshift.rules.registry import RuleRegistry


def write(root: Path, rel_path: str, content: str) -> Path:
  """Write a file under root, creating parent directories."""
  path = root / rel_path
  path.parent.mkdir(parents=True, exist_ok=True)
  path.write_text(content)
  return path


@pytest.fixture(autouse=True)
def clean_extensions():
  """Reset the process-wide extension registry around every test."""
  extensions.clear()
  yield
  extensions.clear()


@pytest.fixture
def registry() -> RuleRegistry:
  return RuleRegistry()


@pytest.fixture
def rails_app(tmp_path: Path) -> Path:
  """A small Rails application tree."""
  write(tmp_path, "Gemfile", """source 'https://rubygems.org'

ruby '2.7.0'

gem 'rails', '~> 6.1.0'
gem 'pg'
""")
  write(tmp_path, "config/application.rb", """require_relative 'boot'

module Shop
  class Application < Rails::Application
    config.load_defaults 6.1
  end
end
""")
  write(tmp_path, "app/models/user.rb", """class User < ApplicationRecord
  def touch_login
    self.update_attributes(last_login_at: Time.now)
  end
end
""")
  return tmp_path
