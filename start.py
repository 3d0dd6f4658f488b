"""Entry point to run the dental clinic API, optionally seeding the admin account."""

import argparse
import asyncio
import subprocess
import sys
import os
import platform
from pathlib import Path

# Load .env file FIRST before the app settings are read
from dotenv import load_dotenv
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)
print(f"✅ Loaded environment from: {env_path}")


def kill_port(port: int):
    """Kill any process running on the specified port."""
    if platform.system() not in ("Darwin", "Linux"):
        return False

    try:
        result = subprocess.run(
            ["lsof", "-ti", f":{port}"],
            capture_output=True,
            text=True
        )
    except OSError as e:
        print(f"   Could not check port {port}: {e}")
        return False

    pids = [pid for pid in result.stdout.strip().split('\n') if pid]
    for pid in pids:
        print(f"   Killing process {pid} on port {port}...")
        subprocess.run(["kill", "-9", pid], capture_output=True)
    if pids:
        print(f"   Port {port} cleared")
    return bool(pids)


async def seed_admin():
    """Create the admin account from ADMIN_* settings if it is missing."""
    from app.config import settings
    from app.database import AsyncSessionLocal, init_db
    from app.services.user_service import UserService

    if not settings.admin_password:
        print("⚠️ ADMIN_PASSWORD not set - skipping admin seed")
        return

    await init_db()
    async with AsyncSessionLocal() as session:
        admin = await UserService(session).ensure_admin(
            settings.admin_name, settings.admin_email, settings.admin_password
        )
        await session.commit()
        print(f"✅ Admin account ready: {admin.email}")


def main():
    parser = argparse.ArgumentParser(description="Run the dental clinic booking API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--seed-admin", action="store_true", help="Create the admin account first")
    args = parser.parse_args()

    print("=" * 50)
    print("Starting Dental Clinic Booking API")
    print("=" * 50)
    print()

    if args.seed_admin:
        asyncio.run(seed_admin())
        print()

    if not kill_port(args.port):
        print(f"   Port {args.port} is available")

    command = [sys.executable, "-m", "uvicorn", "app.main:app", "--host", args.host, "--port", str(args.port)]
    if args.reload:
        command.append("--reload")

    print(f"- API: http://localhost:{args.port}")
    print(f"- API Docs: http://localhost:{args.port}/docs")
    print()

    cwd = os.path.dirname(os.path.abspath(__file__))
    try:
        subprocess.run(command, cwd=cwd, env=os.environ.copy())
    except KeyboardInterrupt:
        print()
        print("Server stopped.")


if __name__ == "__main__":
    main()
