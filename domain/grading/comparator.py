from typing import Optional


def compare(actual: Optional[str], expected: Optional[str]) -> bool:
    """So sánh output thực tế với output mong đợi.

    Bỏ khoảng trắng đầu/cuối ở cả hai phía rồi so sánh chính xác từng ký tự.
    Không so sánh gần đúng số thực: bài nào cần thì tác giả tự chuẩn hoá
    expected output. `None` (không có stdout) chỉ khớp khi expected rỗng.
    """
    return (actual or "").strip() == (expected or "").strip()
