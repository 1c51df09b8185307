"""
UIフォント管理モジュール。

クロスプラットフォーム（Windows/Mac/Linux）で最適な等幅フォントを選択する機能を提供します。
"""
from PySide6.QtGui import QFont, QFontDatabase

# @intent:constant 優先して使用する等幅フォント。
PREFERRED_FONTS = ["Consolas", "Menlo", "Monaco", "DejaVu Sans Mono", "Courier New"]

# @intent:responsibility 現在のシステムで利用可能な最適な等幅フォントファミリー名を返します。
def get_monospace_font_family() -> str:
    available_families = QFontDatabase.families()
    for font in PREFERRED_FONTS:
        if font in available_families:
            return font
    # Qtのシステムデフォルトの等幅フォントを使用
    return QFontDatabase.systemFont(QFontDatabase.FixedFont).family()

def get_monospace_font(size: int = 10) -> QFont:
    return QFont(get_monospace_font_family(), size)
