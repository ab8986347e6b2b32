from unittest.mock import patch

import pytest

SCRIPT = "societybills.scripts.recalculate_interest"


class TestRecalculateInterest:
    @patch(f"{SCRIPT}.configure_logging")
    @patch(f"{SCRIPT}.initialize_db")
    @patch(f"{SCRIPT}.get_audit_log_repository")
    @patch(f"{SCRIPT}.get_billing_config_repository")
    @patch(f"{SCRIPT}.get_bill_repository")
    @patch(f"{SCRIPT}.BillService")
    def test_dry_run(
        self, mock_service_cls, mock_bill_repo, mock_config_repo, mock_audit_repo, mock_init_db, mock_logging,
        sample_bill, sample_config,
    ):
        from societybills.scripts.recalculate_interest import main

        mock_bill_repo.return_value.list_unsettled.return_value = [sample_bill(id="b1")]
        mock_config_repo.return_value.list_by_society.return_value = [sample_config()]

        with patch("sys.argv", ["prog", "soc-1", "--dry-run"]):
            main()

        mock_service_cls.assert_not_called()

    @patch(f"{SCRIPT}.configure_logging")
    @patch(f"{SCRIPT}.initialize_db")
    @patch(f"{SCRIPT}.get_audit_log_repository")
    @patch(f"{SCRIPT}.get_billing_config_repository")
    @patch(f"{SCRIPT}.get_bill_repository")
    @patch(f"{SCRIPT}.BillService")
    def test_recalculates(
        self, mock_service_cls, mock_bill_repo, mock_config_repo, mock_audit_repo, mock_init_db, mock_logging,
        sample_bill,
    ):
        from societybills.scripts.recalculate_interest import main

        bill = sample_bill(id="b1")
        mock_bill_repo.return_value.list_unsettled.return_value = [bill]
        mock_config_repo.return_value.list_by_society.return_value = []
        mock_service_cls.return_value.recalculate_interest.return_value = [bill]

        with patch("sys.argv", ["prog", "soc-1"]):
            main()

        mock_service_cls.return_value.recalculate_interest.assert_called_once()
        assert mock_service_cls.return_value.recalculate_interest.call_args.args[0] == "soc-1"

    @patch(f"{SCRIPT}.configure_logging")
    @patch(f"{SCRIPT}.initialize_db")
    @patch(f"{SCRIPT}.get_audit_log_repository")
    @patch(f"{SCRIPT}.get_billing_config_repository")
    @patch(f"{SCRIPT}.get_bill_repository")
    def test_no_unsettled_bills(self, mock_bill_repo, mock_config_repo, mock_audit_repo, mock_init_db, mock_logging):
        from societybills.scripts.recalculate_interest import main

        mock_bill_repo.return_value.list_unsettled.return_value = []

        with patch("sys.argv", ["prog", "soc-1"]):
            main()

    def test_requires_society_id(self):
        from societybills.scripts.recalculate_interest import main

        with patch("sys.argv", ["prog"]), pytest.raises(SystemExit):
            main()
