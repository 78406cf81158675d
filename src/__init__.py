"""ntfy 위젯 오버레이"""
