#!/usr/bin/env python3
"""Account/Contact Joint: Keeping a Parent and Its Children in Sync.

================================================================================
WHAT IS A JOINT?
================================================================================

Two collections are linked by a foreign key: each Contact holds the external
id of its Account in ``AccountId``.  A joint keeps two denormalized copies
consistent across that link:

    Contact.account   : snapshot of the Account (Name + local id)
    Account.contacts  : list of Contact summaries (LastName + local id)

The sync engine calls the joint's hooks at the right moments:

    Account arrives            →  on_parent_inserted
    Contact cleansed           →  enhance_cleanse(...)
    Contact about to be sent   →  enhance_prepare(...)
    Contact inserted/removed   →  on_child_inserted / on_child_removed


================================================================================
RUN IT
================================================================================

    python examples/01_account_contacts.py
"""

import asyncio

from joinery import InMemoryCollection, MissingExternalIdError, build_joint
from joinery.core.logging import configure_logging


async def main() -> None:
    configure_logging(level="INFO", json_format=False, service="example")

    accounts = InMemoryCollection("Account", key_field="Id", local_key_field="_id")
    contacts = InMemoryCollection("Contact", key_field="Id", local_key_field="_id")

    joint = build_joint(
        parent_entity="Account",
        child_entity="Contact",
        lookup_field="AccountId",
        parent_field_name="account",
        parent_fields=["Name"],
        parent_collection=accounts,
        child_collection=contacts,
        related_list_name="contacts",
        related_list_fields=["LastName"],
    )
    print("Hooks:", sorted(joint.hooks()))

    # ── 1. Cleanse: the contact gains a snapshot of its account ──────────
    acme = await accounts.insert({"_id": "a1", "Id": "001A", "Name": "Acme"})
    cleanse = joint.enhance_cleanse(lambda rec: {**rec, "LastName": rec["LastName"].title()})
    ada = await cleanse({"_id": "c1", "AccountId": "001A", "LastName": "lovelace"})
    print("Cleansed contact:", ada)

    # A contact whose account has not arrived yet only logs a warning
    await cleanse({"_id": "c2", "AccountId": "001Z", "LastName": "hopper"})

    # ── 2. Related list: the account lists its contacts ─────────────────
    await contacts.insert(ada)
    await joint.on_child_inserted(ada)
    print("Account contacts:", (await accounts.get({"Id": "001A"}))["contacts"])

    # ── 3. Prepare: the outgoing contact gets its account's external id ──
    prepare = joint.enhance_prepare()
    outgoing = {"_id": "c3", "LastName": "Babbage", "account": {"_id": "a1"}}
    print("Prepared contact:", await prepare(outgoing, "insert"))

    # An account that was never synced out blocks the send
    await accounts.insert({"_id": "a2", "Name": "Initech"})
    try:
        await prepare({"_id": "c4", "account": {"_id": "a2"}}, "insert")
    except MissingExternalIdError as exc:
        print("Blocked:", exc.to_dict())

    # ── 4. Parent re-inserted: related list rebuilt from the children ────
    await joint.on_parent_inserted(acme)
    print("Resynced contacts:", (await accounts.get({"Id": "001A"}))["contacts"])


if __name__ == "__main__":
    asyncio.run(main())
