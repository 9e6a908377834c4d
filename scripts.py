"""
開発用ユーティリティコマンド（lint / format / 型チェック / テスト）
"""

import subprocess
import sys

# 品質チェック対象ディレクトリの定数
QUALITY_CHECK_DIRS = ["src", "tests"]


def _run(cmd: list[str]) -> int:
    return subprocess.run(cmd).returncode


def lint():
    """
    ruffでコードの静的解析を実行する
    """
    sys.exit(_run(["ruff", "check"] + QUALITY_CHECK_DIRS))


def format():
    """
    ruffでコードフォーマットを実行する
    """
    sys.exit(_run(["ruff", "format"] + QUALITY_CHECK_DIRS))


def type_check():
    """
    型チェックを実行する (ty)
    """
    sys.exit(_run(["ty", "check", "src"]))


def test():
    """
    pytestでテストを実行する（追加の引数はそのまま渡す）
    """
    sys.exit(_run(["pytest"] + sys.argv[1:]))


def check():
    """
    型チェック、Lint、テストをまとめて実行する（修正はしない）
    """
    results = {
        "型チェック": subprocess.run(["ty", "check", "src"], capture_output=True),
        "Lint": subprocess.run(["ruff", "check"] + QUALITY_CHECK_DIRS, capture_output=True),
        "テスト": subprocess.run(["pytest", "-q"], capture_output=True),
    }

    print("=" * 50)
    print("実行結果サマリー")
    print("=" * 50)
    for name, result in results.items():
        status = "PASS" if result.returncode == 0 else "FAIL"
        print(f"{name}: {status}")

    # 失敗したものだけ詳細を表示
    for name, result in results.items():
        if result.returncode != 0:
            print(f"\n{name}のエラー:")
            print(result.stdout.decode())
            print(result.stderr.decode())

    sys.exit(1 if any(r.returncode != 0 for r in results.values()) else 0)
