"""Print the DDL for the hosted tables, in dependency order.

    python -m gooddeeds.schema > schema.sql
"""

from gooddeeds.chat.models import chat_participants_sql, chat_rooms_sql, messages_sql
from gooddeeds.friendship.models import friends_sql, profiles_sql


def all_statements() -> list[str]:
    return [
        profiles_sql,
        friends_sql,
        chat_rooms_sql,
        chat_participants_sql,
        messages_sql,
    ]


def main():
    print("\n".join(sql.strip() + "\n" for sql in all_statements()))


if __name__ == "__main__":
    main()
