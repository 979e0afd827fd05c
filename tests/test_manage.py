from auth import verify_password
from manage import main


def test_create_and_revoke_admin(fake_db, capsys):
    assert main(["create-admin", "owner@siraq.test", "s3cret"], database=fake_db) == 0
    user = fake_db["user"].find_one({"email": "owner@siraq.test"})
    assert user["admin"] is True
    assert verify_password("s3cret", user["password"])

    assert main(["set-admin", "owner@siraq.test", "--revoke"], database=fake_db) == 0
    assert fake_db["user"].find_one({"email": "owner@siraq.test"})["admin"] is False
    assert "admin=False" in capsys.readouterr().out


def test_set_admin_requires_existing_user(fake_db, capsys):
    assert main(["set-admin", "nobody@siraq.test"], database=fake_db) == 1
    assert "password is required" in capsys.readouterr().err
