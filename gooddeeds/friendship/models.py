friends_sql = """
CREATE TYPE friend_status AS ENUM ('pending', 'accepted', 'blocked');

CREATE TABLE friends (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),

    -- Directional: user_id sent the request, friend_id received it.
    -- Accepted friendships are stored in both directions.
    user_id UUID NOT NULL REFERENCES auth.users(id) ON DELETE CASCADE,
    friend_id UUID NOT NULL REFERENCES auth.users(id) ON DELETE CASCADE,

    status friend_status NOT NULL DEFAULT 'pending',

    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),

    CONSTRAINT unique_friend_row UNIQUE (user_id, friend_id),
    CONSTRAINT prevent_self_friend CHECK (user_id <> friend_id)
);
"""

profiles_sql = """
CREATE TABLE profiles (
    id UUID PRIMARY KEY REFERENCES auth.users(id) ON DELETE CASCADE,
    full_name TEXT,
    avatar_url TEXT,
    email TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
"""
