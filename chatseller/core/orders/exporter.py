"""
Export orders to XLSX format for the merchant.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from chatseller.config import settings
from chatseller.core.models import format_price
from chatseller.core.orders.models import Order

logger = logging.getLogger(__name__)


class OrderExporter:
    """Export orders to XLSX format."""

    # Styles
    HEADER_FONT = Font(bold=True, size=14)
    SUBHEADER_FONT = Font(bold=True, size=11)

    HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    HEADER_FONT_WHITE = Font(bold=True, size=11, color="FFFFFF")

    ALT_ROW_FILL = PatternFill(start_color="D9E2F3", end_color="D9E2F3", fill_type="solid")

    THIN_BORDER = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )

    CENTER_ALIGN = Alignment(horizontal="center", vertical="center")
    LEFT_ALIGN = Alignment(horizontal="left", vertical="center")
    RIGHT_ALIGN = Alignment(horizontal="right", vertical="center")
    WRAP_ALIGN = Alignment(horizontal="left", vertical="top", wrap_text=True)

    def export(self, order: Order, output_dir: Optional[Path] = None) -> Path:
        """
        Export order to XLSX file.

        Args:
            order: Order to export
            output_dir: Directory for output file (default: settings.orders_dir)

        Returns:
            Path to created XLSX file
        """
        if output_dir is None:
            output_dir = settings.orders_dir

        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = output_dir / f"commande_{order.order_number}_{timestamp}.xlsx"

        wb = Workbook()
        ws = wb.active
        ws.title = f"Commande {order.order_number}"

        ws.column_dimensions["A"].width = 18
        ws.column_dimensions["B"].width = 35
        ws.column_dimensions["C"].width = 12
        ws.column_dimensions["D"].width = 15
        ws.column_dimensions["E"].width = 15

        row = 1

        # === HEADER ===
        ws.merge_cells(f"A{row}:E{row}")
        cell = ws.cell(row=row, column=1, value=f"COMMANDE {order.order_number}")
        cell.font = self.HEADER_FONT
        cell.alignment = self.CENTER_ALIGN
        row += 1

        ws.merge_cells(f"A{row}:E{row}")
        cell = ws.cell(row=row, column=1, value=f"du {order.created_at.strftime('%d/%m/%Y %H:%M')}")
        cell.alignment = self.CENTER_ALIGN
        row += 2

        # === ITEMS TABLE ===
        ws.cell(row=row, column=1, value="PRODUITS :").font = self.SUBHEADER_FONT
        row += 1

        headers = ["N°", "Produit", "Quantité", "Prix unitaire", "Montant"]
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.HEADER_FONT_WHITE
            cell.fill = self.HEADER_FILL
            cell.border = self.THIN_BORDER
            cell.alignment = self.CENTER_ALIGN
        row += 1

        for i, item in enumerate(order.items, 1):
            values = [
                i,
                item.name,
                item.quantity,
                f"{format_price(item.unit_price)} {order.currency}",
                f"{format_price(item.total_price)} {order.currency}",
            ]

            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.THIN_BORDER
                if col == 1:
                    cell.alignment = self.CENTER_ALIGN
                elif col in [3, 4, 5]:
                    cell.alignment = self.RIGHT_ALIGN
                else:
                    cell.alignment = self.LEFT_ALIGN

                if i % 2 == 0:
                    cell.fill = self.ALT_ROW_FILL
            row += 1

        # Total row
        ws.merge_cells(f"A{row}:D{row}")
        cell = ws.cell(row=row, column=1, value="TOTAL :")
        cell.font = self.SUBHEADER_FONT
        cell.border = self.THIN_BORDER
        cell.alignment = self.RIGHT_ALIGN

        cell = ws.cell(
            row=row, column=5, value=f"{format_price(order.total_amount)} {order.currency}"
        )
        cell.font = self.SUBHEADER_FONT
        cell.border = self.THIN_BORDER
        cell.alignment = self.RIGHT_ALIGN
        row += 2

        # === CUSTOMER & PAYMENT ===
        ws.cell(row=row, column=1, value="CLIENT :").font = self.SUBHEADER_FONT
        row += 1

        details = [
            ("Nom :", order.customer_name),
            ("Téléphone :", order.customer_phone),
            ("Adresse :", order.customer_address),
            ("Paiement :", order.payment_method),
        ]
        for label, value in details:
            if not value:
                continue
            ws.merge_cells(f"B{row}:E{row}")
            ws.cell(row=row, column=1, value=label)
            cell = ws.cell(row=row, column=2, value=value)
            cell.alignment = self.WRAP_ALIGN
            row += 1

        wb.save(filepath)
        logger.info(f"Order exported to {filepath}")

        return filepath


# Singleton instance
order_exporter = OrderExporter()
