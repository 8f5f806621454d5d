#!/usr/bin/env python3
"""
RubroQuote - Application principale
Point d'entrée de l'outil de préparation et validation des orçamentos AoRubro.

Modules disponibles:
- Tableau de bord des orçamentos (création, édition, suppression)
- Formulaire de calcul et flux de validation (Rascunho -> Enviado ao Comercial)
- Relatórios: prazos do fluxo et materiais
"""

import sys
import traceback


def main():
    """Point d'entrée principal de l'application"""
    try:
        # 1. Imports inside try to catch import-time errors
        import wx
        from core.app_initializer import build_services, initialize_app
        from infrastructure.logging_service import clear_logs_directory

        # 2. Dynamic path handling if frozen
        if hasattr(sys, '_MEIPASS'):
            app_root = sys._MEIPASS
            if app_root not in sys.path:
                sys.path.insert(0, app_root)

        # 3. Initialize components
        initialize_app()
        services = build_services()

        from ui.frames.main_frame import MainFrame

        # 4. Run application
        class RubroQuoteApp(wx.App):
            def OnInit(self):
                wx.InitAllImageHandlers()
                self.frame = MainFrame(services)
                self.SetTopWindow(self.frame)
                return True

        app = RubroQuoteApp()
        app.MainLoop()

        # Cleanup
        clear_logs_directory()

    except Exception as e:
        error_msg = f"CRITICAL STARTUP ERROR:\n\n{str(e)}\n\n{traceback.format_exc()}"
        print(error_msg)

        # Try to show a dialog using wx if possible
        try:
            import wx
            if not wx.GetApp():
                temp_app = wx.App()
            wx.MessageBox(error_msg, "RubroQuote - Startup Failure", wx.OK | wx.ICON_ERROR)
        except Exception:
            # Fallback to simple file write if wx failed too
            with open("CRASH_REPORT.txt", "w", encoding="utf-8") as f:
                f.write(error_msg)
        sys.exit(1)


if __name__ == "__main__":
    main()
