"""
Setup script to create the backend .env file
"""
import os
import secrets


def create_env_file():
    """Create .env file from user input"""
    print("=" * 60)
    print("QuizHub Environment Setup")
    print("=" * 60)
    print()

    if os.path.exists('.env'):
        response = input("⚠️  .env file already exists. Overwrite? (y/N): ")
        if response.lower() != 'y':
            print("❌ Cancelled. Keeping existing .env file.")
            return

    mongodb_url = input("MongoDB URL (default: mongodb://localhost:27017): ").strip() or "mongodb://localhost:27017"
    db_name = input("Database name (default: quizhub): ").strip() or "quizhub"
    port = input("Port (default: 3001): ").strip() or "3001"

    env_content = f"""# Server Configuration
PORT={port}

# MongoDB Configuration
MONGODB_URL={mongodb_url}
DATABASE_NAME={db_name}

# JWT Configuration
JWT_SECRET={secrets.token_urlsafe(48)}
JWT_ALGORITHM=HS256
JWT_EXPIRATION_HOURS=24
"""

    try:
        with open('.env', 'w') as f:
            f.write(env_content)
        print()
        print("✅ .env file created successfully!")
        print()
        print("📝 Next steps:")
        print("   1. Run: python -m quizhub.database.seed (to seed demo data)")
        print("   2. Run: python -m quizhub.main (to start the server)")
        print()
    except OSError as e:
        print(f"❌ Error creating .env file: {e}")


if __name__ == "__main__":
    create_env_file()
