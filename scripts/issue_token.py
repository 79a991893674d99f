# flake8: noqa
# scripts/issue_token.py

from datetime import timedelta

import typer

from fims.core.config import settings
from fims.core.security import create_access_token

cli = typer.Typer()


@cli.command()
def main(
    subject: str = typer.Option(
        ..., '--subject', '-s',
        prompt="토큰을 발급할 점검자(이메일 또는 ID)를 입력하세요",
        help="토큰의 sub 클레임으로 기록될 호출자 식별자입니다."
    ),
    minutes: int = typer.Option(
        settings.ACCESS_TOKEN_EXPIRE_MINUTES, '--minutes', '-m',
        help="토큰 만료 시간(분)입니다."
    ),
):
    """
    FIMS API 쓰기 작업에 사용할 Bearer 토큰을 발급합니다.
    """
    if minutes <= 0:
        print("오류: 만료 시간은 1분 이상이어야 합니다.")
        raise typer.Abort()

    token = create_access_token(subject, expires_delta=timedelta(minutes=minutes))
    print(f"{subject} 호출자 토큰이 발급되었습니다. ({minutes}분 유효)")
    print(token)


if __name__ == "__main__":
    cli()
