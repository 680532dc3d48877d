"""SQLModel table definitions."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class TenantModel(SQLModel, table=True):
    """テナント（利用者）テーブル"""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: str = Field(unique=True, index=True)
    plan_id: str | None = None
    message_count: int = 0  # 課金期間内の利用メッセージ数
    billing_start: datetime | None = None
    billing_end: datetime | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PlanModel(SQLModel, table=True):
    """プランテーブル"""

    __tablename__ = "plans"

    id: int | None = Field(default=None, primary_key=True)
    plan_id: str = Field(unique=True, index=True)
    message_limit: int


class ChannelModel(SQLModel, table=True):
    """チャンネル（ボット番号）テーブル"""

    __tablename__ = "chatbots"

    id: int | None = Field(default=None, primary_key=True)
    number: str = Field(unique=True, index=True)
    tenant_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PromptModel(SQLModel, table=True):
    """プロンプト設定テーブル"""

    __tablename__ = "prompts"

    id: int | None = Field(default=None, primary_key=True)
    channel: str = Field(unique=True, index=True)
    system_prompt: str
    image_url_1: str | None = None
    image_url_2: str | None = None
    image_url_3: str | None = None
    image_url_4: str | None = None
    image_url_5: str | None = None
    image_url_6: str | None = None
    image_url_7: str | None = None
    video_url_1: str | None = None
    video_url_2: str | None = None
    video_url_3: str | None = None
    video_url_4: str | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MessageModel(SQLModel, table=True):
    """応答の監査ログテーブル"""

    __tablename__ = "messages"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: str = Field(index=True)
    channel: str = Field(index=True)
    participant: str = Field(index=True)
    prompt_id: str
    question: str
    reply: str
    type: str = "response"
    conversation_id: str = Field(index=True)
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
