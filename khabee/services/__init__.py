"""
                        Services Module

Business logic and the external collaborators it talks to. Each
collaborator has an in-memory implementation (development, tests) and a
real one (staging, production), picked by ENV_MODE.

Services:
    - orders: placement, queries and status updates
    - kitchens: kitchen list/pages and owner menu management
    - users: profiles
    - auth: phone OTP sign-in (mock / Supabase)
    - realtime: order change-feed (in-memory / Redis) and live views
    - cache: path-keyed view cache (in-memory / Redis)
    - notifications: customer SMS (mock / Twilio)
"""
