"""Gemfile and configuration file checks.

These rules only report. The matching fixes are whole-file
transformations in upshift.transforms, run on request.
"""

import re

from upshift.rules.builtin.base import detection

GEMFILE = "Gemfile"

OUTDATED_GEMS = {
  "protected_attributes": "The protected_attributes gem is not compatible with Rails 5+",
  "activerecord-deprecated_finders": (
    "The activerecord-deprecated_finders gem is not compatible with Rails 5+"
  ),
  "rails-controller-testing": (
    "Ensure rails-controller-testing is properly configured for Rails 5+"
  ),
  "coffee-rails": "The coffee-rails gem is deprecated in Rails 6+",
  "sass-rails": "Consider using cssbundling-rails in Rails 7+",
  "uglifier": "Consider using jsbundling-rails in Rails 7+",
}

RUBY_DIRECTIVE_MISSING = r"""\A(?![\s\S]*^\s*ruby\s+['"]\d)"""
LOAD_DEFAULTS_MISSING = r"\A(?![\s\S]*config\.load_defaults)"
HOSTS_MISSING = r"\A(?![\s\S]*config\.hosts)"
UGLIFIER_COMPRESSOR = r"config\.assets\.js_compressor = :uglifier"


def gem_pattern(name: str) -> str:
  return rf"""gem\s+['"]{re.escape(name)}['"]"""


DETECTIONS = [
  *(
    detection(gem_pattern(name), message, file_glob=GEMFILE)
    for name, message in OUTDATED_GEMS.items()
  ),
  detection(
    RUBY_DIRECTIVE_MISSING,
    "Rails 6+ requires Ruby 2.5.0 or newer (2.7.0 for Rails 7) - "
    "specify ruby version in Gemfile",
    file_glob=GEMFILE,
    version_constraint=">= 6.0.0",
  ),
  detection(
    LOAD_DEFAULTS_MISSING,
    "Missing config.load_defaults - add this to set new framework defaults",
    file_glob="config/application.rb",
  ),
  detection(
    HOSTS_MISSING,
    "Missing config.hosts configuration - Rails 6+ uses DNS rebinding protection",
    file_glob="config/environments/development.rb",
    version_constraint=">= 6.0.0",
  ),
  detection(
    UGLIFIER_COMPRESSOR,
    "Uglifier is not recommended in Rails 7+ - consider using jsbundling-rails",
    file_glob="config/environments/production.rb",
    version_constraint=">= 7.0.0",
  ),
]

SUBSTITUTIONS: dict = {}
