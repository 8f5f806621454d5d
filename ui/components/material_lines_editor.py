# ui/components/material_lines_editor.py
import wx
import wx.grid as gridlib

from domain.errors import LastMaterialLineError
from domain.formatting import format_amount
from domain.quote import Quote

COL_SUPPLIER, COL_DESCRIPTION, COL_VALUE, COL_MARKED = range(4)


class MaterialLinesEditor(wx.Panel):
    """Grid of the material lines of a quote (supplier, description, cost, marked-up cost)."""

    def __init__(self, parent):
        super().__init__(parent)
        self.quote = None
        self.on_changed = None
        self._build_ui()

    def _build_ui(self):
        main_sizer = wx.BoxSizer(wx.VERTICAL)

        header = wx.BoxSizer(wx.HORIZONTAL)
        title = wx.StaticText(self, label="MATERIAIS E SUBCONTRATOS")
        title.SetFont(wx.Font(10, wx.FONTFAMILY_DEFAULT, wx.FONTSTYLE_NORMAL, wx.FONTWEIGHT_BOLD))
        header.Add(title, 0, wx.ALL | wx.ALIGN_CENTER_VERTICAL, 5)
        header.AddStretchSpacer()

        self.add_btn = wx.Button(self, label="+ Linha")
        self.add_btn.Bind(wx.EVT_BUTTON, self._on_add_line)
        header.Add(self.add_btn, 0, wx.ALL, 5)

        self.remove_btn = wx.Button(self, label="Remover linha")
        self.remove_btn.Bind(wx.EVT_BUTTON, self._on_remove_line)
        header.Add(self.remove_btn, 0, wx.ALL, 5)
        main_sizer.Add(header, 0, wx.EXPAND)

        self.grid = gridlib.Grid(self)
        self.grid.CreateGrid(0, 4)
        self.grid.SetColLabelValue(COL_SUPPLIER, "Fornecedor")
        self.grid.SetColLabelValue(COL_DESCRIPTION, "Descrição")
        self.grid.SetColLabelValue(COL_VALUE, "Custo (€)")
        self.grid.SetColLabelValue(COL_MARKED, "C/ Margem (€)")
        self.grid.SetColSize(COL_SUPPLIER, 160)
        self.grid.SetColSize(COL_DESCRIPTION, 320)
        self.grid.SetColSize(COL_VALUE, 100)
        self.grid.SetColSize(COL_MARKED, 110)
        self.grid.Bind(gridlib.EVT_GRID_CELL_CHANGED, self._on_cell_changed)
        main_sizer.Add(self.grid, 1, wx.EXPAND | wx.ALL, 5)

        self.SetSizer(main_sizer)

    def set_supplier_suggestions(self, suppliers):
        """Dropdown of known suppliers on the first column, free text still accepted."""
        attr = gridlib.GridCellAttr()
        attr.SetEditor(gridlib.GridCellChoiceEditor(list(suppliers), allowOthers=True))
        self.grid.SetColAttr(COL_SUPPLIER, attr)

    def load_quote(self, quote: Quote):
        self.quote = quote
        self.refresh()

    def refresh(self):
        if self.grid.GetNumberRows() > 0:
            self.grid.DeleteRows(0, self.grid.GetNumberRows())
        if not self.quote:
            return

        for line in self.quote.materials:
            row = self.grid.GetNumberRows()
            self.grid.AppendRows(1)
            self.grid.SetCellValue(row, COL_SUPPLIER, line.supplier)
            self.grid.SetCellValue(row, COL_DESCRIPTION, line.description)
            self.grid.SetCellValue(row, COL_VALUE, self._amount(line.value))
            self.grid.SetCellValue(row, COL_MARKED, self._amount(line.value_with_margin))
            self.grid.SetCellAlignment(row, COL_VALUE, wx.ALIGN_RIGHT, wx.ALIGN_CENTER)
            self.grid.SetCellAlignment(row, COL_MARKED, wx.ALIGN_RIGHT, wx.ALIGN_CENTER)

        self.remove_btn.Enable(len(self.quote.materials) > 1)

    @staticmethod
    def _amount(value: float) -> str:
        return format_amount(value) if value else ""

    def _on_cell_changed(self, event):
        if not self.quote:
            return
        row, col = event.GetRow(), event.GetCol()
        line = self.quote.materials[row]
        raw = self.grid.GetCellValue(row, col)

        if col == COL_SUPPLIER:
            line.set_supplier(raw)
            self.grid.SetCellValue(row, col, line.supplier)
        elif col == COL_DESCRIPTION:
            line.set_description(raw)
            self.grid.SetCellValue(row, col, line.description)
        elif col == COL_VALUE:
            # le coût recalcule la marge (x1.5)
            line.set_value(raw.replace(" ", ""))
            self.grid.SetCellValue(row, COL_VALUE, self._amount(line.value))
            self.grid.SetCellValue(row, COL_MARKED, self._amount(line.value_with_margin))
        elif col == COL_MARKED:
            line.set_value_with_margin(raw.replace(" ", ""))
            self.grid.SetCellValue(row, COL_MARKED, self._amount(line.value_with_margin))

        if self.on_changed:
            self.on_changed()

    def _on_add_line(self, event):
        if not self.quote:
            return
        self.quote.add_material()
        self.refresh()
        if self.on_changed:
            self.on_changed()

    def _on_remove_line(self, event):
        if not self.quote:
            return
        row = self.grid.GetGridCursorRow()
        if row < 0 or row >= len(self.quote.materials):
            wx.MessageBox("Selecione a linha a remover.", "Informação", wx.OK | wx.ICON_INFORMATION)
            return
        try:
            self.quote.remove_material(self.quote.materials[row].id)
        except LastMaterialLineError as e:
            wx.MessageBox(str(e), "Informação", wx.OK | wx.ICON_INFORMATION)
            return
        self.refresh()
        if self.on_changed:
            self.on_changed()
