"""Tests for module renames and job relocations."""

import logging
from pathlib import Path

import pytest
from conftest import write
from upshift.files import FileWriteError
from upshift.models import UpgradeOptions
from upshift.transforms import namespaces
from upshift.transforms.namespaces import (
  STUB_HEADER,
  camelize,
  extract_class,
  rename_api_module,
  update_namespaces,
)

STOCK_JOB = """module Inventory
  class SyncStockJob < ApplicationJob
    queue_as :default

    def perform(id)
      Product.find(id).sync
    end
  end
end
"""

RELOCATED_STOCK_JOB = """module Sidekiq
  module Stock
    class Sync < ApplicationJob
      queue_as :default

      def perform(id)
        Product.find(id).sync
      end
    end
  end
end
"""

CHECK_JOB = """class CheckJob < ApplicationJob
  def perform(terminal_id)
    Terminal.find(terminal_id).ping
  end
end
"""

ORDER_JOB = """module SidekiqJobs
  module Orders
    module Process
      class CapturePayment < ApplicationJob
        def perform(order_id)
        end
      end
    end
  end
end
"""


class TestHelpers:
  def test_camelize(self) -> None:
    assert camelize("capture_payment") == "CapturePayment"
    assert camelize("sync") == "Sync"

  def test_extract_class(self) -> None:
    superclass, body = extract_class(STOCK_JOB, "SyncStockJob")
    assert superclass == "< ApplicationJob"
    assert body == "queue_as :default\n\ndef perform(id)\n  Product.find(id).sync\nend"

  def test_extract_missing_class(self) -> None:
    assert extract_class(STOCK_JOB, "OtherJob") is None


class TestStockJobs:
  def test_relocates_class_and_leaves_stub(self, tmp_path: Path) -> None:
    write(tmp_path, "app/jobs/inventory/sync_stock_job.rb", STOCK_JOB)

    changed = update_namespaces(tmp_path, UpgradeOptions(update_stock_jobs=True))

    assert changed == ["app/jobs/sidekiq/stock/sync.rb", "app/jobs/inventory/sync_stock_job.rb"]
    assert (tmp_path / "app/jobs/sidekiq/stock/sync.rb").read_text() == RELOCATED_STOCK_JOB

    stub = (tmp_path / "app/jobs/inventory/sync_stock_job.rb").read_text()
    assert stub.startswith(STUB_HEADER)
    assert "module Inventory\n  SyncStockJob = ::Sidekiq::Stock::Sync\nend\n" in stub

  def test_references_updated(self, tmp_path: Path) -> None:
    write(tmp_path, "app/jobs/inventory/sync_stock_job.rb", STOCK_JOB)
    caller = write(
      tmp_path,
      "app/controllers/products_controller.rb",
      "Inventory::SyncStockJob.perform_later(product.id)\n",
    )
    schema = write(tmp_path, "db/schema.rb", "# Inventory::SyncStockJob\n")

    changed = update_namespaces(tmp_path, UpgradeOptions(update_stock_jobs=True))

    assert "app/controllers/products_controller.rb" in changed
    assert caller.read_text() == "Sidekiq::Stock::Sync.perform_later(product.id)\n"
    assert schema.read_text() == "# Inventory::SyncStockJob\n"

  def test_second_run_is_noop(self, tmp_path: Path) -> None:
    write(tmp_path, "app/jobs/inventory/sync_stock_job.rb", STOCK_JOB)
    options = UpgradeOptions(update_stock_jobs=True)

    update_namespaces(tmp_path, options)
    assert update_namespaces(tmp_path, options) == []

  def test_existing_target_not_overwritten(self, tmp_path: Path) -> None:
    write(tmp_path, "app/jobs/inventory/sync_stock_job.rb", STOCK_JOB)
    target = write(tmp_path, "app/jobs/sidekiq/stock/sync.rb", "# hand written\n")

    changed = update_namespaces(tmp_path, UpgradeOptions(update_stock_jobs=True))

    assert target.read_text() == "# hand written\n"
    assert changed == ["app/jobs/inventory/sync_stock_job.rb"]

  def test_disabled_by_default(self, tmp_path: Path) -> None:
    path = write(tmp_path, "app/jobs/inventory/sync_stock_job.rb", STOCK_JOB)
    assert update_namespaces(tmp_path, UpgradeOptions()) == []
    assert path.read_text() == STOCK_JOB


class TestOrderJobs:
  def test_relocates_process_job(self, tmp_path: Path) -> None:
    write(tmp_path, "app/jobs/sidekiq_jobs/orders/process/capture_payment.rb", ORDER_JOB)

    update_namespaces(tmp_path, UpgradeOptions(update_order_jobs=True))

    moved = (tmp_path / "app/jobs/sidekiq/orders/process/capture_payment.rb").read_text()
    assert moved.startswith("module Sidekiq\n  module Orders\n    module Process\n")
    assert "      class CapturePayment < ApplicationJob\n" in moved

    stub = (tmp_path / "app/jobs/sidekiq_jobs/orders/process/capture_payment.rb").read_text()
    assert "CapturePayment = ::Sidekiq::Orders::Process::CapturePayment" in stub


class TestPosStatusJobs:
  def test_relocates_check_job(self, tmp_path: Path) -> None:
    write(tmp_path, "app/jobs/check_job.rb", CHECK_JOB)
    caller = write(
      tmp_path,
      "app/models/terminal.rb",
      "CheckJob.perform_later(id)\nPos::CheckJob.run\n",
    )

    update_namespaces(tmp_path, UpgradeOptions(update_pos_status_jobs=True))

    moved = (tmp_path / "app/jobs/sidekiq/pos_status/check.rb").read_text()
    assert "class Check < ApplicationJob" in moved
    assert "Terminal.find(terminal_id).ping" in moved
    assert (tmp_path / "app/jobs/check_job.rb").read_text().endswith(
      "CheckJob = ::Sidekiq::PosStatus::Check\n"
    )
    assert caller.read_text() == "Sidekiq::PosStatus::Check.perform_later(id)\nPos::CheckJob.run\n"

  def test_undecodable_file_skipped(self, tmp_path: Path, caplog) -> None:
    write(tmp_path, "app/jobs/check_job.rb", CHECK_JOB)
    caller = write(tmp_path, "app/models/terminal.rb", "CheckJob.perform_later(id)\n")
    legacy = tmp_path / "lib/legacy.rb"
    legacy.parent.mkdir(parents=True)
    legacy.write_bytes(b"# caf\xe9\nCheckJob.perform_later(1)\n")

    with caplog.at_level(logging.WARNING):
      changed = update_namespaces(tmp_path, UpgradeOptions(update_pos_status_jobs=True))

    assert "app/jobs/check_job.rb" in changed
    assert "lib/legacy.rb" not in changed
    assert caller.read_text() == "Sidekiq::PosStatus::Check.perform_later(id)\n"
    assert legacy.read_bytes() == b"# caf\xe9\nCheckJob.perform_later(1)\n"
    assert "Skipping lib/legacy.rb" in caplog.text

  def test_stub_written_after_references(self, tmp_path: Path, monkeypatch) -> None:
    source = write(tmp_path, "app/jobs/check_job.rb", CHECK_JOB)
    caller = write(tmp_path, "app/models/terminal.rb", "CheckJob.perform_later(id)\n")
    options = UpgradeOptions(update_pos_status_jobs=True)

    def fail(root, relocation):
      raise FileWriteError("app/models/terminal.rb", "Permission denied")

    with monkeypatch.context() as m:
      m.setattr(namespaces, "update_references", fail)
      with pytest.raises(FileWriteError):
        update_namespaces(tmp_path, options)

    # The move is not marked done, so a second run finishes it
    assert source.read_text() == CHECK_JOB
    changed = update_namespaces(tmp_path, options)

    assert "app/models/terminal.rb" in changed
    assert caller.read_text() == "Sidekiq::PosStatus::Check.perform_later(id)\n"
    assert source.read_text().startswith(STUB_HEADER)


class TestApiModule:
  def test_rename(self, tmp_path: Path) -> None:
    controller = write(
      tmp_path,
      "app/controllers/api/v1/users_controller.rb",
      "module API\n  module V1\n    class UsersController < API::BaseController\n    end\n  end\nend\n",
    )
    model = write(tmp_path, "app/models/api_key.rb", "# API keys\nclass ApiKey\nend\n")

    changed = rename_api_module(tmp_path)

    assert changed == ["app/controllers/api/v1/users_controller.rb"]
    assert "API" not in controller.read_text()
    assert model.read_text() == "# API keys\nclass ApiKey\nend\n"

  def test_job_namespaces_flag_enables_everything(self, tmp_path: Path) -> None:
    write(tmp_path, "app/controllers/api/base_controller.rb", "module API\nend\n")
    write(tmp_path, "app/jobs/check_job.rb", CHECK_JOB)

    changed = update_namespaces(tmp_path, UpgradeOptions(update_job_namespaces=True))

    assert "app/controllers/api/base_controller.rb" in changed
    assert "app/jobs/sidekiq/pos_status/check.rb" in changed
