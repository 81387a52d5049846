import time

import formledger
from formledger import ResponseType

OWNER = "0x0000000000000000000000000000000000000001"
RESPONDER = "0x00000000000000000000000000000000000000aa"


def main() -> None:
    server = formledger.run(port=57794, owner=OWNER, caller=OWNER)
    owner = server.as_client() if isinstance(server, formledger.FormsServer) else server

    form_id = owner.create_form("Test Form", "A two-question survey")
    age = owner.add_question_to_form(form_id, "Age", "In years", True, ResponseType.NUMERIC)
    comment = owner.add_question_to_form(form_id, "Comment", "Anything else?")
    owner.add_responder(form_id, RESPONDER)

    owner.submit_response(form_id, age, 46, caller=RESPONDER)
    owner.submit_response(form_id, comment, "Looks good", caller=RESPONDER)

    print(owner.get_form_details(form_id))
    print(owner.get_response_history(form_id, age))

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
