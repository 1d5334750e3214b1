"""인사말, 계산기, 시간 조회, 이미지 생성을 MCP로 제공하는 서버예요."""

__version__ = "1.0.0"
