import unittest
from unittest.mock import AsyncMock, MagicMock

from app.core.exceptions import APIError, BoardException, ValidationError
from app.core.result import Result
from app.models.line_item import LineItem, UserProfile
from app.models.line_item_board import ColumnType, LineItemBoardModel, build_columns
from app.utils import constants


def _records_to_items(pairs):
    return [
        LineItem(id=f"00k{i}", opportunity_id="006A", product_id=f"01t{i}", product_name=f"Produit {i}",
                 unit_price=10.0, total_price=10.0 * q, quantity=q, stock=s)
        for i, (q, s) in enumerate(pairs, start=1)
    ]


class TestBuildColumns(unittest.TestCase):

    def test_base_columns_for_unknown_profile(self):
        columns = build_columns(None)
        self.assertEqual(
            [c.label for c in columns],
            [constants.LABEL_PRODUCT_NAME, constants.LABEL_UNIT_PRICE, constants.LABEL_TOTAL_PRICE,
             constants.LABEL_QUANTITY, constants.LABEL_STOCK, constants.LABEL_DELETE]
        )
        delete_column = columns[-1]
        self.assertEqual(delete_column.column_type, ColumnType.BUTTON_ICON)
        self.assertEqual(delete_column.action, constants.ACTION_DELETE)
        self.assertEqual(delete_column.fixed_width, 40)
        self.assertEqual(delete_column.class_field, "delete_style")

    def test_view_product_only_for_system_administrator(self):
        for profile, expected in [
            ("System Administrator", True),
            (constants.PROFILE_SALES, False),
            ("Standard User", False),
            ("System Administrator ", False),
            (None, False),
        ]:
            actions = [c.action for c in build_columns(profile)]
            self.assertEqual(constants.ACTION_VIEW_PRODUCT in actions, expected, profile)

    def test_styled_columns_point_at_row_fields(self):
        by_label = {c.label: c for c in build_columns(None)}
        self.assertEqual(by_label[constants.LABEL_QUANTITY].class_field, "quantity_style")
        self.assertEqual(by_label[constants.LABEL_STOCK].class_field, "stock_warning")
        self.assertEqual(by_label[constants.LABEL_UNIT_PRICE].column_type, ColumnType.CURRENCY)


class TestLineItemBoardModel(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.service = MagicMock()
        self.service.fetch_line_items = AsyncMock(return_value=Result.success([]))
        self.service.delete_line_item = AsyncMock(return_value=Result.success(None))
        self.notifier = MagicMock()
        self.navigator = MagicMock()
        self.model = LineItemBoardModel(
            "006A",
            line_item_service=self.service,
            notifier=self.notifier,
            navigator=self.navigator,
            record_base_url="https://org.example.com/lightning/r/Product2/",
        )
        self.changes = []
        self.model.add_listener(lambda m: self.changes.append((m.is_modal_open, m.line_to_delete)))

    def _assert_modal_invariant(self):
        for is_open, line_id in self.changes:
            self.assertEqual(is_open, line_id is not None)

    def test_requires_an_opportunity_id(self):
        with self.assertRaises(ValidationError):
            LineItemBoardModel("")

    async def test_overstock_scenario(self):
        self.service.fetch_line_items.return_value = Result.success(_records_to_items([(2, 5), (5, 5), (6, 4)]))

        await self.model.load()

        self.service.fetch_line_items.assert_awaited_once_with("006A")
        rows = self.model.rows
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0].quantity_style, constants.STYLE_QUANTITY_OK)
        self.assertEqual(rows[1].quantity_style, constants.STYLE_QUANTITY_OK)
        self.assertEqual(rows[2].quantity_style, constants.STYLE_QUANTITY_ERROR)
        self.assertEqual(rows[2].delete_style, constants.STYLE_DELETE_WARNING)
        self.assertTrue(self.model.has_error)
        self.assertEqual(self.model.error_message, constants.MESSAGE_OVERSTOCK_WARNING)
        self.assertTrue(self.model.has_lines)

    async def test_reload_without_overstock_clears_the_banner(self):
        self.service.fetch_line_items.return_value = Result.success(_records_to_items([(6, 4)]))
        await self.model.load()
        self.assertTrue(self.model.has_error)

        self.service.fetch_line_items.return_value = Result.success(_records_to_items([(1, 4)]))
        await self.model.load()
        self.assertFalse(self.model.has_error)
        self.assertEqual(self.model.error_message, "")

    async def test_empty_result_has_no_lines(self):
        await self.model.load()
        self.assertFalse(self.model.has_lines)
        self.assertFalse(self.model.has_error)

    async def test_fetch_failure_notifies_and_keeps_rows(self):
        self.service.fetch_line_items.return_value = Result.success(_records_to_items([(2, 5)]))
        await self.model.load()
        rows_before = list(self.model.rows)

        self.service.fetch_line_items.return_value = Result.failure(APIError("Service unavailable", status_code=503))
        await self.model.load()

        self.notifier.assert_called_once_with(
            constants.TOAST_TITLE_ERROR, "Service unavailable", constants.SEVERITY_ERROR
        )
        self.assertEqual(self.model.rows, rows_before)

    async def test_confirmed_delete_calls_endpoint_notifies_and_reloads(self):
        self.service.fetch_line_items.return_value = Result.success(_records_to_items([(2, 5), (6, 4)]))
        await self.model.load()

        self.model.handle_row_action(constants.ACTION_DELETE, self.model.rows[1])
        self.assertTrue(self.model.is_modal_open)
        self.assertEqual(self.model.line_to_delete, "00k2")

        self.service.fetch_line_items.return_value = Result.success(_records_to_items([(2, 5)]))
        await self.model.confirm_delete()

        self.service.delete_line_item.assert_awaited_once_with("00k2")
        self.notifier.assert_called_once_with(
            constants.TOAST_TITLE_SUCCESS, constants.MESSAGE_LINE_DELETED, constants.SEVERITY_SUCCESS
        )
        self.assertEqual(self.service.fetch_line_items.await_count, 2)
        self.assertFalse(self.model.is_modal_open)
        self.assertIsNone(self.model.line_to_delete)
        self.assertFalse(self.model.has_error)
        self._assert_modal_invariant()

    async def test_failed_delete_still_closes_the_modal(self):
        self.service.delete_line_item.return_value = Result.failure(APIError("Entity is locked", status_code=400))
        self.model.request_delete("00k1")

        await self.model.confirm_delete()

        self.notifier.assert_called_once_with(constants.TOAST_TITLE_ERROR, "Entity is locked", constants.SEVERITY_ERROR)
        self.assertFalse(self.model.is_modal_open)
        self.assertIsNone(self.model.line_to_delete)
        self.service.fetch_line_items.assert_not_awaited()
        self._assert_modal_invariant()

    async def test_raising_delete_still_closes_the_modal(self):
        self.service.delete_line_item.side_effect = RuntimeError("socket closed")
        self.model.request_delete("00k1")

        with self.assertRaises(RuntimeError):
            await self.model.confirm_delete()

        self.assertFalse(self.model.is_modal_open)
        self.assertFalse(self.model.is_confirm_in_flight)

    async def test_cancelled_delete_never_calls_endpoint(self):
        self.model.request_delete("00k1")
        self.model.cancel_delete()

        self.service.delete_line_item.assert_not_awaited()
        self.assertFalse(self.model.is_modal_open)
        self.assertIsNone(self.model.line_to_delete)
        self._assert_modal_invariant()

    async def test_confirm_without_pending_delete_does_nothing(self):
        await self.model.confirm_delete()
        self.service.delete_line_item.assert_not_awaited()

    def test_second_delete_request_ignored_while_modal_open(self):
        self.model.request_delete("00k1")
        self.model.request_delete("00k2")
        self.assertEqual(self.model.line_to_delete, "00k1")

    def test_no_new_request_or_cancel_while_confirm_in_flight(self):
        self.model.request_delete("00k1")
        self.assertEqual(self.model.begin_confirm(), "00k1")
        self.assertIsNone(self.model.begin_confirm())

        self.model.cancel_delete()
        self.model.request_delete("00k2")
        self.assertEqual(self.model.line_to_delete, "00k1")
        self.assertTrue(self.model.is_confirm_in_flight)

        self.assertTrue(self.model.finish_confirm(Result.success(None)))
        self.assertFalse(self.model.is_modal_open)
        self._assert_modal_invariant()

    def test_profile_resolution_drives_columns_and_flag(self):
        self.model.apply_profile(Result.success(UserProfile("System Administrator")))
        self.assertEqual(self.model.user_profile, "System Administrator")
        self.assertTrue(self.model.is_admin_or_commercial)
        self.assertIn(constants.ACTION_VIEW_PRODUCT, [c.action for c in self.model.columns])

        self.model.apply_profile(Result.success(UserProfile(constants.PROFILE_SALES)))
        self.assertTrue(self.model.is_admin_or_commercial)
        self.assertNotIn(constants.ACTION_VIEW_PRODUCT, [c.action for c in self.model.columns])

    def test_profile_failure_degrades_silently(self):
        self.model.apply_profile(Result.success(UserProfile("System Administrator")))
        self.model.apply_profile(Result.failure(APIError("boom", status_code=500)))

        self.assertIsNone(self.model.user_profile)
        self.assertFalse(self.model.is_admin_or_commercial)
        self.assertNotIn(constants.ACTION_VIEW_PRODUCT, [c.action for c in self.model.columns])
        self.notifier.assert_not_called()

    def test_view_product_navigates_for_system_administrator(self):
        self.model.apply_line_items(_records_to_items([(1, 1)]))
        self.model.apply_profile(Result.success(UserProfile("System Administrator")))

        self.model.handle_row_action(constants.ACTION_VIEW_PRODUCT, self.model.rows[0])

        self.navigator.assert_called_once_with("https://org.example.com/lightning/r/Product2/01t1")

    def test_view_product_refused_for_other_profiles(self):
        self.model.apply_line_items(_records_to_items([(1, 1)]))
        self.model.apply_profile(Result.success(UserProfile(constants.PROFILE_SALES)))

        self.model.handle_row_action(constants.ACTION_VIEW_PRODUCT, self.model.rows[0])

        self.navigator.assert_not_called()

    def test_unknown_action_is_ignored(self):
        self.model.apply_line_items(_records_to_items([(1, 1)]))
        self.model.handle_row_action("archive", self.model.rows[0])
        self.assertFalse(self.model.is_modal_open)
        self.navigator.assert_not_called()

    def test_results_after_dispose_are_ignored(self):
        self.model.request_delete("00k1")
        self.model.begin_confirm()
        self.model.dispose()
        self.changes.clear()

        self.model.apply_line_items(_records_to_items([(6, 4)]))
        self.model.apply_load_error(BoardException("late"))
        reload_needed = self.model.finish_confirm(Result.success(None))

        self.assertFalse(reload_needed)
        self.assertEqual(self.model.rows, [])
        self.notifier.assert_not_called()
        self.assertEqual(self.changes, [])
        self.assertTrue(self.model.disposed)

    def test_notifications_are_logged_without_a_notifier(self):
        model = LineItemBoardModel("006A")
        with self.assertLogs("app.models.line_item_board", level="INFO") as logs:
            model.apply_load_error(APIError("Service unavailable", status_code=503))
        self.assertTrue(any("Service unavailable" in line for line in logs.output))


if __name__ == '__main__':
    unittest.main()
